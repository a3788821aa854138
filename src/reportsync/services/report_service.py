import asyncio
from dataclasses import dataclass
from datetime import date
import logging
from typing import Callable, Dict, Optional

from reportsync.core.profile import StudentProfile
from reportsync.core.reports import WeeklyReportRecord, initialize_week
from reportsync.core.schedule import DateLike, iso_week, normalize_to_week_start
from reportsync.core.status import ReportStatus, StatusEngine
from reportsync.services.local_store import LocalReportStore
from reportsync.services.report_gateway import RemoteReportGateway


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitOutcome:
    saved: bool
    submitted: bool = False
    draft_removed: bool = False


class ReportSyncService:
    """Offline-first access to one student's weekly reports.

    Blocking file and network work runs in worker threads, so every
    operation can be awaited with a timeout or cancelled by the caller.
    """

    def __init__(
        self,
        student: StudentProfile,
        store: LocalReportStore,
        gateway: RemoteReportGateway,
        status_engine: StatusEngine,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.student = student
        self.store = store
        self.gateway = gateway
        self.status_engine = status_engine
        self.clock = clock

    def _load_local(self, week_start: date) -> Optional[WeeklyReportRecord]:
        result = self.store.load(week_start)
        if result.is_corrupt:
            logger.warning("Local draft for week %s is corrupt (%s); treating as missing", week_start, result.reason)
        return result.unwrap_or_none()

    def _load_week(self, week_start: date) -> WeeklyReportRecord:
        report = self._load_local(week_start)
        if report is not None:
            return report

        year, week_number = iso_week(week_start)
        report = self.gateway.fetch(self.student.id, year, week_number)
        if report is not None:
            return report

        logger.debug("Building a fresh report for week %s", week_start)
        return initialize_week(week_start, self.student.working_days, student_id=self.student.id)

    async def load_week(self, week_start: DateLike) -> WeeklyReportRecord:
        week_start = self.student.enrollment.validate_week(week_start, today=self.clock())
        return await asyncio.to_thread(self._load_week, week_start)

    async def save(self, report: WeeklyReportRecord) -> bool:
        report.update_totals()
        saved = await asyncio.to_thread(self.store.save, report.start_date, report)
        if not saved:
            logger.error("Report for week %s could not be saved locally", report.start_date)
        return saved

    def _submit(self, report: WeeklyReportRecord) -> SubmitOutcome:
        report.update_totals()
        if not self.store.save(report.start_date, report):
            return SubmitOutcome(saved=False)

        self.gateway.submit(report)

        removed = self.store.remove(report.start_date)
        if not removed:
            logger.error("Week %s was submitted but its local draft could not be removed", report.start_date)
            # keep the leftover draft marked as submitted
            self.store.save(report.start_date, report)
        return SubmitOutcome(saved=True, submitted=True, draft_removed=removed)

    async def submit(self, report: WeeklyReportRecord) -> SubmitOutcome:
        """Save locally, upload, then drop the local draft.

        A ``TransportError`` from the upload propagates and leaves the draft
        on disk.
        """
        self.student.enrollment.validate_week(report.start_date, today=self.clock())
        return await asyncio.to_thread(self._submit, report)

    def _status(self, week_start: date) -> ReportStatus:
        cached = self.status_engine.cached(self.student.id, week_start)
        if cached is not None:
            return cached
        report = self._load_local(week_start)
        return self.status_engine.calculate(report, self.student.working_days)

    async def status(self, week_start: DateLike) -> ReportStatus:
        return await asyncio.to_thread(self._status, normalize_to_week_start(week_start))

    async def week_overview(self) -> Dict[date, ReportStatus]:
        window = self.student.enrollment
        weeks = list(window.reportable_weeks(today=self.clock()))
        return await asyncio.to_thread(lambda: {week: self._status(week) for week in weeks})
