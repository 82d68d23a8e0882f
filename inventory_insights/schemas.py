from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import OLDEST, parse_timestamp, to_quantity


class WireModel(BaseModel):
    """
    Base for every record we read from the store or hand back in a report.
    Attributes are snake_case; the stored/JSON form keeps the camelCase names the
    portals already use.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self, **kwargs) -> dict:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


# --- Stored records ---


class Batch(WireModel):
    """One tracked lot of an item. Quantities arrive as strings or numbers from the intake form."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    lot_number: str = Field(default="", alias="lotNumber")
    expiry: str = Field(default="", alias="expiry")
    open_qty: int = Field(default=0, alias="openQty")
    closed_qty: int = Field(default=0, alias="closedQty")
    open_date: str = Field(default="", alias="openDate")
    notes: str = Field(default="", alias="notes")

    @field_validator("open_qty", "closed_qty", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> int:
        return to_quantity(value)

    @field_validator("lot_number", "expiry", "open_date", "notes", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            return ""
        return str(value)

    @property
    def total_qty(self) -> int:
        return self.open_qty + self.closed_qty


class ItemSnapshot(WireModel):
    batches: list[Batch] = Field(default_factory=list)


class InventorySubmission(WireModel):
    id: str = ""
    slug: str = ""
    submitted_at: Optional[str] = Field(default=None, alias="submittedAt")
    submitted_by: Optional[str] = Field(default=None, alias="submittedBy")
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @property
    def timestamp(self) -> datetime:
        """Parsed submittedAt; unparseable values sort as the oldest possible instant."""
        return parse_timestamp(self.submitted_at) or OLDEST


class CustomItem(WireModel):
    id: str
    category: str
    item_name: str = Field(alias="itemName")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class TemplateCategory(WireModel):
    category: str
    items: list[str] = Field(default_factory=list)


class ClientRecord(WireModel):
    slug: str
    name: Optional[str] = None
    practice_name: Optional[str] = Field(default=None, alias="practiceName")

    @property
    def display_name(self) -> str:
        return self.practice_name or self.name or self.slug


# --- Alerts ---


class LowStockAlert(WireModel):
    category: str
    item_name: str = Field(alias="itemName")
    quantity: int
    lot_number: Optional[str] = Field(default=None, alias="lotNumber")


class ExpiringAlert(WireModel):
    category: str
    item_name: str = Field(alias="itemName")
    expiry: str
    lot_number: Optional[str] = Field(default=None, alias="lotNumber")
    days_until_expiry: int = Field(alias="daysUntilExpiry")


class Alerts(WireModel):
    low_stock: list[LowStockAlert] = Field(default_factory=list, alias="lowStock")
    expiring_soon: list[ExpiringAlert] = Field(default_factory=list, alias="expiringSoon")


# --- Usage trends ---


class ItemChange(WireModel):
    category: str
    item_name: str = Field(alias="itemName")
    current_qty: int = Field(alias="currentQty")
    prev_qty: int = Field(alias="prevQty")
    change: int
    trend: Literal["up", "down", "stable"]


class UsageSnapshot(WireModel):
    date: Optional[str]
    total_quantity: int = Field(alias="totalQuantity")
    item_count: int = Field(alias="itemCount")


class ConsumptionRate(WireModel):
    category: str
    item_name: str = Field(alias="itemName")
    total_consumed: int = Field(alias="totalConsumed")
    total_days: int = Field(alias="totalDays")
    data_points: int = Field(alias="dataPoints")
    current_qty: int = Field(alias="currentQty")
    avg_weekly_rate: float = Field(alias="avgWeeklyRate")
    weekly_rate: str = Field(alias="weeklyRate")
    weeks_remaining: int = Field(alias="weeksRemaining")


class TimeSeriesPoint(WireModel):
    date: Optional[str]
    quantity: int


class ItemTimeSeries(WireModel):
    key: str
    category: str
    item_name: str = Field(alias="itemName")
    data_points: list[TimeSeriesPoint] = Field(default_factory=list, alias="dataPoints")


class UsageTrends(WireModel):
    item_changes: list[ItemChange] = Field(default_factory=list, alias="itemChanges")
    usage_summary: list[UsageSnapshot] = Field(default_factory=list, alias="usageSummary")
    consumption_rate: list[ConsumptionRate] = Field(default_factory=list, alias="consumptionRate")
    item_time_series: list[ItemTimeSeries] = Field(default_factory=list, alias="itemTimeSeries")


# --- Reports ---


class InventoryReport(WireModel):
    """Everything a client portal needs to render the inventory dashboard."""

    submissions: list[InventorySubmission] = Field(default_factory=list)
    template: list[TemplateCategory] = Field(default_factory=list)
    custom_items: list[dict[str, Any]] = Field(default_factory=list, alias="customItems")
    alerts: Alerts = Field(default_factory=Alerts)
    usage_trends: UsageTrends = Field(default_factory=UsageTrends, alias="usageTrends")


class LatestSnapshot(WireModel):
    id: Optional[str] = None
    slug: Optional[str] = None
    submitted_at: Optional[str] = Field(default=None, alias="submittedAt")
    submitted_by: Optional[str] = Field(default=None, alias="submittedBy")
    data: dict[str, ItemSnapshot] = Field(default_factory=dict)


class ClientLowStockAlert(LowStockAlert):
    client_name: str = Field(alias="clientName")
    slug: str


class ClientExpiringAlert(ExpiringAlert):
    client_name: str = Field(alias="clientName")
    slug: str


class ClientSummary(WireModel):
    slug: str
    client_name: str = Field(alias="clientName")
    last_submission: Optional[str] = Field(alias="lastSubmission")
    total_items: int = Field(alias="totalItems")
    total_quantity: int = Field(alias="totalQuantity")
    low_stock_count: int = Field(alias="lowStockCount")
    expiring_count: int = Field(alias="expiringCount")
    submission_count: int = Field(alias="submissionCount")


class AdminSummary(WireModel):
    total_clients: int = Field(alias="totalClients")
    active_clients: int = Field(alias="activeClients")
    total_low_stock_alerts: int = Field(alias="totalLowStockAlerts")
    total_expiring_alerts: int = Field(alias="totalExpiringAlerts")


class AdminAlerts(WireModel):
    low_stock: list[ClientLowStockAlert] = Field(default_factory=list, alias="lowStock")
    expiring_soon: list[ClientExpiringAlert] = Field(default_factory=list, alias="expiringSoon")


class AdminReport(WireModel):
    summary: AdminSummary
    alerts: AdminAlerts = Field(default_factory=AdminAlerts)
    client_summaries: list[ClientSummary] = Field(default_factory=list, alias="clientSummaries")
    inactive_clients: list[ClientSummary] = Field(default_factory=list, alias="inactiveClients")
