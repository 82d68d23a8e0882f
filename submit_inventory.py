import argparse
import json
import logging
from pathlib import Path

from inventory_insights.logger import setup_logger
from inventory_insights.repository import KeyValueInventoryRepository

logger = logging.getLogger(__name__)


def submit_from_file(slug: str, path: Path, submitted_by: str = None):
    """
    Appends one inventory snapshot read from a JSON file. The file holds the
    'category|item' -> batches mapping exactly as the intake form posts it.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"❌ Could not read {path}: {e}")
        return None

    repository = KeyValueInventoryRepository.from_settings()
    try:
        submission = repository.submit(slug, data, submitted_by=submitted_by)
    except ValueError as e:
        logger.error(f"❌ Submission rejected: {e}")
        return None

    logger.info(f"✅ Stored submission {submission.id} at {submission.submitted_at}")
    return submission


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Record an inventory snapshot for a client.")
    parser.add_argument("slug", help="Client slug")
    parser.add_argument("file", type=Path, help="JSON file with the inventory data")
    parser.add_argument("--by", dest="submitted_by", default=None, help="Submitter name or email")
    args = parser.parse_args()

    setup_logger()
    submit_from_file(args.slug, args.file, submitted_by=args.submitted_by)
