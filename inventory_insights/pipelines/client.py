import logging
from datetime import datetime
from typing import Optional

from inventory_insights.pipeline import ReportPipeline
from inventory_insights.report import assemble_client_report
from inventory_insights.repository import InventoryRepository
from inventory_insights.schemas import InventoryReport, InventorySubmission

logger = logging.getLogger(__name__)


class ClientReportPipeline(ReportPipeline):
    def __init__(
        self,
        slug: str,
        repository: InventoryRepository,
        now: Optional[datetime] = None,
        test_mode: bool = False,
    ):
        super().__init__(f"client_{slug}", repository, now=now, test_mode=test_mode)
        self.slug = slug

    def extract(self) -> list[InventorySubmission]:
        logger.info(f"--- Loading inventory history for '{self.slug}' ---")
        history = self.repository.get_history(self.slug)
        if history:
            logger.info(f"  > {len(history)} submission(s), newest {history[0].submitted_at}")
        return history

    def transform(self, history: list[InventorySubmission]) -> Optional[InventoryReport]:
        logger.info("\n--- Computing Alerts & Usage Trends ---")
        report = assemble_client_report(
            history,
            self.repository.get_template(),
            self.repository.get_custom_items(self.slug),
            now=self.now,
        )
        trends = report.usage_trends
        logger.info(f"  > Item changes: {len(trends.item_changes)}")
        logger.info(f"  > Items with a consumption rate: {len(trends.consumption_rate)}")
        logger.info(f"  > Items charted: {len(trends.item_time_series)}")
        return report

    def alert_counts(self, report: InventoryReport) -> dict[str, int]:
        return {
            "lowStock": len(report.alerts.low_stock),
            "expiringSoon": len(report.alerts.expiring_soon),
        }
