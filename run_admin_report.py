import argparse

from inventory_insights.logger import setup_logger
from inventory_insights.pipelines import AdminReportPipeline
from inventory_insights.repository import KeyValueInventoryRepository


def run_admin_report(test_mode: bool = False):
    """Aggregates alerts across every client and flags the ones that stopped submitting."""
    repository = KeyValueInventoryRepository.from_settings()
    AdminReportPipeline(repository, test_mode=test_mode).run()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Build the cross-client inventory report.")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post")
    args = parser.parse_args()

    setup_logger()
    run_admin_report(test_mode=args.test)
