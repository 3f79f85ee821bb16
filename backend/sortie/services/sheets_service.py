import logging

import requests

from sortie.core.config import settings
from sortie.core.constants import SHEETS_SOURCE
from sortie.schemas.sheets import SheetsEntry
from sortie.utils.dates import utcnow

logger = logging.getLogger(__name__)


class SheetsError(Exception):
    pass


def send_to_sheets(entry: SheetsEntry) -> None:
    """POST one row to a Google Apps Script webhook bound to a spreadsheet."""
    payload = {
        "name": entry.name,
        "email": entry.email,
        "message": entry.message or "",
        "timestamp": utcnow().isoformat(),
        "source": SHEETS_SOURCE,
    }

    try:
        response = requests.post(
            str(entry.webhook_url),
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.SHEETS_TIMEOUT,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("Google Sheets webhook failed: %s", e)
        raise SheetsError(str(e)) from e

    logger.info("Row for %s sent to Google Sheets", entry.email)
