import logging
from typing import Optional

from inventory_insights.pipeline import ReportPipeline
from inventory_insights.report import assemble_admin_report
from inventory_insights.schemas import AdminReport, InventorySubmission

logger = logging.getLogger(__name__)


class AdminReportPipeline(ReportPipeline):
    def __init__(self, repository, now=None, test_mode: bool = False):
        super().__init__("admin", repository, now=now, test_mode=test_mode)

    def extract(self) -> list[InventorySubmission]:
        logger.info("--- Loading inventory history for all clients ---")
        history = self.repository.get_all_history()
        slugs = {s.slug for s in history}
        logger.info(f"  > {len(history)} submission(s) across {len(slugs)} client(s)")
        return history

    def transform(self, history: list[InventorySubmission]) -> Optional[AdminReport]:
        logger.info("\n--- Aggregating Client Alerts ---")
        report = assemble_admin_report(history, self.repository.get_clients(), now=self.now)

        for client in report.inactive_clients:
            logger.warning(
                f"  > ⚠️ {client.client_name} has not submitted since {client.last_submission}"
            )
        return report

    def alert_counts(self, report: AdminReport) -> dict[str, int]:
        return {
            "lowStock": report.summary.total_low_stock_alerts,
            "expiringSoon": report.summary.total_expiring_alerts,
            "inactiveClients": len(report.inactive_clients),
        }
