import json
import logging
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from . import settings
from .schemas import ClientRecord, CustomItem, InventorySubmission, TemplateCategory
from .utils import utc_now

logger = logging.getLogger(__name__)


# --- Key-value stores ---


class KeyValueStore(ABC):
    """A flat key -> JSON value store. Values are copied on the way in and out."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[dict] = None):
        self._data = deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = deepcopy(value)


class JsonFileStore(KeyValueStore):
    """
    Keeps the whole store in a single JSON document on disk.
    A missing or unreadable file is treated as an empty store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"❌ Store file {self.path.name} is unreadable, treating as empty: {e}")
            return {}
        return document if isinstance(document, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        document = self._read()
        document[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, default=str)
        tmp_path.replace(self.path)


# --- Repository ---


class InventoryRepository(ABC):
    """
    Read side the report builders depend on. Implementations return each client's
    history newest first and already capped; callers never re-cap.
    """

    @abstractmethod
    def get_history(
        self, slug: str, limit: int = settings.HISTORY_FETCH_LIMIT
    ) -> list[InventorySubmission]:
        pass

    @abstractmethod
    def get_all_history(self) -> list[InventorySubmission]:
        pass

    @abstractmethod
    def get_template(self) -> list[TemplateCategory]:
        pass

    @abstractmethod
    def get_custom_items(self, slug: str) -> list[dict]:
        pass

    @abstractmethod
    def get_clients(self) -> list[ClientRecord]:
        pass


def _parse_records(model, raw: Any) -> list:
    records = []
    for item in raw if isinstance(raw, list) else []:
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} record: {e}")
    return records


def newest_first(submissions: Iterable[InventorySubmission]) -> list[InventorySubmission]:
    return sorted(submissions, key=lambda s: s.timestamp, reverse=True)


class KeyValueInventoryRepository(InventoryRepository):
    """Inventory history, template, custom items and client directory over a KeyValueStore."""

    def __init__(self, store: KeyValueStore, max_submissions: int = settings.MAX_STORED_SUBMISSIONS):
        self.store = store
        self.max_submissions = max_submissions

    @classmethod
    def from_settings(cls) -> "KeyValueInventoryRepository":
        return cls(JsonFileStore(settings.DATA_DIR / settings.STORE_FILENAME))

    # --- Reads ---

    def _all_submissions(self) -> list[InventorySubmission]:
        return _parse_records(InventorySubmission, self.store.get(settings.SUBMISSIONS_KEY, []))

    def get_all_history(self) -> list[InventorySubmission]:
        return newest_first(self._all_submissions())

    def get_history(
        self, slug: str, limit: int = settings.HISTORY_FETCH_LIMIT
    ) -> list[InventorySubmission]:
        client_submissions = [s for s in self._all_submissions() if s.slug == slug]
        return newest_first(client_submissions)[:limit]

    def get_template(self) -> list[TemplateCategory]:
        raw = self.store.get(settings.TEMPLATE_KEY)
        template = _parse_records(TemplateCategory, raw) if raw else []
        return template or _parse_records(TemplateCategory, settings.DEFAULT_INVENTORY_ITEMS)

    def get_custom_items(self, slug: str) -> list[dict]:
        items = self.store.get(f"{settings.CUSTOM_ITEMS_KEY_PREFIX}{slug}", [])
        return items if isinstance(items, list) else []

    def get_clients(self) -> list[ClientRecord]:
        return _parse_records(ClientRecord, self.store.get(settings.CLIENTS_KEY, []))

    # --- Writes ---

    def submit(self, slug: str, data: dict, submitted_by: Optional[str] = None) -> InventorySubmission:
        """Records a new snapshot at the head of the global history, trimming the oldest beyond the cap."""
        if not slug:
            raise ValueError("Client slug is required")
        if not isinstance(data, dict):
            raise ValueError("Inventory data must be a mapping of 'category|item' keys")

        submission = InventorySubmission(
            id=str(uuid.uuid4()),
            slug=slug,
            data=data,
            submitted_at=utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            submitted_by=submitted_by,
        )

        raw = self.store.get(settings.SUBMISSIONS_KEY, [])
        all_submissions = raw if isinstance(raw, list) else []
        all_submissions.insert(0, submission.to_json())
        if len(all_submissions) > self.max_submissions:
            dropped = len(all_submissions) - self.max_submissions
            del all_submissions[self.max_submissions:]
            logger.info(f"Trimmed {dropped} oldest submission(s) over the {self.max_submissions} cap")
        self.store.set(settings.SUBMISSIONS_KEY, all_submissions)

        logger.info(f"📦 Inventory submitted for '{slug}' ({len(data)} items) by {submitted_by or 'unknown'}")
        return submission

    def delete_submissions(self, submission_ids: Iterable[str]) -> int:
        ids = set(submission_ids)
        raw = self.store.get(settings.SUBMISSIONS_KEY, [])
        all_submissions = raw if isinstance(raw, list) else []
        kept = [s for s in all_submissions if not (isinstance(s, dict) and s.get("id") in ids)]
        removed = len(all_submissions) - len(kept)
        self.store.set(settings.SUBMISSIONS_KEY, kept)
        logger.info(f"🗑️ Deleted {removed} inventory submission(s)")
        return removed

    def set_template(self, template: list[dict]) -> list[TemplateCategory]:
        categories = [TemplateCategory.model_validate(c) for c in template]
        self.store.set(settings.TEMPLATE_KEY, [c.to_json() for c in categories])
        return categories

    def add_custom_item(self, slug: str, category: str, item_name: str) -> CustomItem:
        if not category or not item_name:
            raise ValueError("Category and item name required")
        item = CustomItem(
            id=str(uuid.uuid4()),
            category=category,
            item_name=item_name,
            created_at=utc_now().isoformat(),
        )
        items = self.get_custom_items(slug)
        items.append(item.to_json())
        self.store.set(f"{settings.CUSTOM_ITEMS_KEY_PREFIX}{slug}", items)
        return item

    def remove_custom_item(self, slug: str, item_id: str) -> None:
        items = [i for i in self.get_custom_items(slug) if not (isinstance(i, dict) and i.get("id") == item_id)]
        self.store.set(f"{settings.CUSTOM_ITEMS_KEY_PREFIX}{slug}", items)

    def upsert_client(self, slug: str, name: Optional[str] = None, practice_name: Optional[str] = None) -> ClientRecord:
        record = ClientRecord(slug=slug, name=name, practice_name=practice_name)
        clients = [c for c in self.get_clients() if c.slug != slug]
        clients.append(record)
        self.store.set(settings.CLIENTS_KEY, [c.to_json() for c in clients])
        return record
