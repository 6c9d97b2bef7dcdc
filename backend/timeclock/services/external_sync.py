"""Best-effort mirror of self-service punches into an external time clock.

Runs after the punch is committed (FastAPI background task). Whatever happens
here is logged and swallowed; a punch is recorded once the ledger commits.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from timeclock.core.config import settings

logger = logging.getLogger(__name__)


class ExternalSyncService:
    """Posts punch events to the configured external time clock webhook."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        name_map: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ):
        self.webhook_url = webhook_url if webhook_url is not None else settings.EXTERNAL_SYNC_WEBHOOK_URL
        self.name_map = name_map if name_map is not None else settings.EXTERNAL_SYNC_NAME_MAP
        self.timeout = timeout or settings.EXTERNAL_SYNC_TIMEOUT

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def external_name(self, employee_name: str) -> Optional[str]:
        if not self.name_map:
            return employee_name
        return self.name_map.get(employee_name)

    def sync_punch(self, employee_name: str, punch_type: str, timestamp: datetime) -> dict:
        """Send one punch. Never raises."""
        if not self.enabled:
            logger.debug("External sync URL not configured, skipping")
            return {"skipped": True, "reason": "no_url_configured"}

        external_name = self.external_name(employee_name)
        if not external_name:
            logger.warning(f"External sync skipped: no mapping for employee {employee_name!r}")
            return {"success": False, "error": "EMPLOYEE_NOT_MAPPED"}

        payload = {
            "employee_name": external_name,
            "punch_type": punch_type,
            "timestamp": timestamp.isoformat(),
            "event_type": f"clock_{punch_type}",
        }
        try:
            resp = requests.post(
                self.webhook_url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "X-TimeClock-Event": payload["event_type"],
                    "X-TimeClock-Timestamp": datetime.now(timezone.utc).isoformat(),
                },
                timeout=self.timeout,
            )
            result = {
                "success": resp.status_code < 400,
                "status_code": resp.status_code,
                "response": resp.text[:500],
            }
            if resp.status_code >= 400:
                logger.warning(f"External sync {punch_type} for {external_name} returned {resp.status_code}: {resp.text[:200]}")
            else:
                logger.info(f"External sync {punch_type} for {external_name} sent ({resp.status_code})")
            return result
        except Exception as e:
            logger.error(f"External sync {punch_type} for {external_name} failed: {e}")
            return {"success": False, "error": str(e)}


# Dependency for FastAPI routes
def get_external_sync() -> ExternalSyncService:
    return ExternalSyncService()
