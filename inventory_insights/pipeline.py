import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from inventory_insights import data_handler
from inventory_insights.repository import InventoryRepository
from inventory_insights.schemas import WireModel
from inventory_insights.utils import as_utc

logger = logging.getLogger(__name__)


class ReportPipeline(ABC):
    """
    Abstract base class for report pipelines (client, admin).
    Follows an Extract -> Transform -> Load (ETL) pattern over the inventory store.
    """

    def __init__(
        self,
        report_type: str,
        repository: InventoryRepository,
        now: Optional[datetime] = None,
        test_mode: bool = False,
    ):
        self.report_type = report_type
        self.repository = repository
        self.now = as_utc(now)
        self.test_mode = test_mode

    def run(self) -> Optional[WireModel]:
        """
        Orchestrates the pipeline execution and returns the built report.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No submissions found for {self.report_type}. Building an empty report.")

        # --- 2. TRANSFORM ---
        report = self.transform(raw_data)
        if report is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(report)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return report

    @abstractmethod
    def extract(self) -> Any:
        """
        Pulls the submission history this report is computed from.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Optional[WireModel]:
        """
        Computes the report model from the extracted history.
        """
        pass

    @abstractmethod
    def alert_counts(self, report: WireModel) -> dict[str, int]:
        pass

    def load(self, report: WireModel):
        """
        Saves the report to disk and posts its alerts to the webhook.
        """
        counts = self.alert_counts(report)
        logger.info("\n--- Alert Summary ---")
        for name, count in counts.items():
            logger.info(f"{name}: {count}")

        data_handler.save_report(report, self.report_type)

        if not self.test_mode:
            data_handler.post_to_webhook(
                report=report,
                metadata={"generatedAt": self.now.isoformat(), **counts},
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
