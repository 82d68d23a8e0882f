import json
import logging
from pathlib import Path
from typing import Any, Optional

import requests

from . import settings
from . import utils
from .schemas import WireModel

logger = logging.getLogger(__name__)


def save_report(report: WireModel, report_type: str, output_dir: Optional[Path] = None) -> Path:
    """Saves the report as JSON with a dated filename and returns the path."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    json_path = output_dir / f"{settings.REPORT_FILENAME_BASE}_{report_type}_{date_suffix}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(report.to_json(), f, indent=2, default=str)

    logger.info(f"✅ Report saved to: {json_path}")
    return json_path


def post_to_webhook(report: WireModel, metadata: dict[str, Any], report_type: str) -> bool:
    """
    Posts the report AND its alert summary to the webhook.
    Returns True when the webhook accepted the payload.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} report to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": report.to_json(),
        "statusSummary": metadata,
    }

    try:
        response = requests.post(
            settings.WEBHOOK_URL, json=payload, timeout=settings.WEBHOOK_TIMEOUT_SECONDS
        )
        response.raise_for_status()
        logger.info("✅ Report and summary successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
