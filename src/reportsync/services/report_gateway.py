import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests
from requests import RequestException

from reportsync.config.settings import settings
from reportsync.core.errors import TransportError
from reportsync.core.reports import WeeklyReportRecord
from reportsync.state.session_state import TokenProvider


logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class RemoteReportGateway:
    UPLOAD_PATH = "/weeklyReport/upload"
    FETCH_PATH = "/weeklyReport/{year}/{week}"

    def __init__(
        self,
        base_url: str,
        tokens: TokenProvider,
        *,
        timeout: float = 15,
        submit_retries: int = 3,
        submit_backoff: float = 1.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not base_url:
            raise TransportError("Missing REPORTSYNC_API_BASE_URL in environment")
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens
        self.timeout = timeout
        self.submit_retries = max(0, submit_retries)
        self.submit_backoff = submit_backoff
        self.session = session or requests.Session()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, tokens: TokenProvider) -> "RemoteReportGateway":
        return cls(
            settings.api_base_url,
            tokens,
            timeout=settings.request_timeout,
            submit_retries=settings.submit_retries,
            submit_backoff=settings.submit_backoff,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.tokens.get_access_token()}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_message(res: requests.Response) -> str:
        try:
            data = res.json()
        except ValueError:
            return res.reason or "REPORT_SERVICE_ERROR"
        if isinstance(data, dict):
            return str(data.get("service_message") or data.get("message") or res.reason or "REPORT_SERVICE_ERROR")
        return res.reason or "REPORT_SERVICE_ERROR"

    def _upload(self, report: WeeklyReportRecord) -> None:
        headers = self._headers()
        headers["week_date"] = report.start_date.isoformat()
        url = f"{self.base_url}{self.UPLOAD_PATH}"
        try:
            res = self.session.post(url, headers=headers, data=json.dumps(report.to_dict()), timeout=self.timeout)
        except RequestException as exc:
            raise TransportError(f"REPORT_SERVICE_UNAVAILABLE: {exc}") from exc
        if res.status_code >= 400:
            raise TransportError(self._error_message(res), status_code=res.status_code)

    def submit(self, report: WeeklyReportRecord) -> None:
        """Upload ``report``, retrying transient failures with exponential backoff.

        On success every slot is marked submitted. The last ``TransportError``
        is raised once the retries are spent.
        """
        delay = self.submit_backoff
        attempts = self.submit_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self._upload(report)
                break
            except TransportError as exc:
                retryable = exc.status_code is None or exc.status_code in RETRYABLE_STATUS
                if not retryable or attempt == attempts:
                    logger.error("Submitting week %s failed: %s", report.start_date, exc)
                    raise
                logger.warning(
                    "Attempt %d/%d to submit week %s failed: %s. Retrying in %.1fs",
                    attempt,
                    attempts,
                    report.start_date,
                    exc,
                    delay,
                )
                self._sleep(delay)
                delay *= 2

        report.mark_submitted()
        logger.info("Submitted report for week %s", report.start_date)

    def fetch(self, student_id: int, year: int, week_number: int) -> Optional[WeeklyReportRecord]:
        """Fetch a remote report; any transport or decoding failure yields ``None``."""
        headers = self._headers()
        url = f"{self.base_url}{self.FETCH_PATH.format(year=year, week=week_number)}"
        try:
            res = self.session.get(url, headers=headers, timeout=self.timeout)
        except RequestException as exc:
            logger.warning("Fetching report %s/%s for student %s failed: %s", year, week_number, student_id, exc)
            return None

        if res.status_code >= 400:
            logger.info("No remote report %s/%s for student %s (status %s)", year, week_number, student_id, res.status_code)
            return None

        try:
            data: Any = res.json()
            if isinstance(data, dict) and isinstance(data.get("data"), dict) and "startDate" not in data:
                data = data["data"]
            if not data:
                return None
            return WeeklyReportRecord.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Discarding malformed remote report %s/%s: %s", year, week_number, exc)
            return None
