import argparse
import logging

from inventory_insights.logger import setup_logger
from inventory_insights.pipelines import ClientReportPipeline
from inventory_insights.repository import KeyValueInventoryRepository


def run_client_reports(slugs: list[str], test_mode: bool = False):
    """Builds, saves and posts the inventory report for each client slug."""
    logger = logging.getLogger(__name__)
    repository = KeyValueInventoryRepository.from_settings()

    if not slugs:
        slugs = sorted({s.slug for s in repository.get_all_history()})
        logger.info(f"No slugs given, reporting on all {len(slugs)} client(s) with history")

    for slug in slugs:
        ClientReportPipeline(slug, repository, test_mode=test_mode).run()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Build client inventory reports.")
    parser.add_argument("slugs", nargs="*", help="Client slugs (default: every client with history)")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post")
    args = parser.parse_args()

    setup_logger()
    run_client_reports(args.slugs, test_mode=args.test)
