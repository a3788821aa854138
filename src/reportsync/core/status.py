from datetime import date
from enum import Enum
import logging
import threading
from typing import Dict, Iterable, Optional, Tuple

from reportsync.core.reports import WeeklyReportRecord
from reportsync.core.schedule import DateLike, WorkingDay, as_date, required_hours


logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    COMPLETE = "complete"


def reported_hours(report: WeeklyReportRecord) -> float:
    return sum(slot.hours for slot in report.slots() if slot.is_reported)


def classify(reported: float, required: float) -> ReportStatus:
    if reported == 0:
        return ReportStatus.NONE
    if reported >= required:
        return ReportStatus.COMPLETE
    return ReportStatus.PARTIAL


class StatusEngine:
    """Memoized week status, keyed by ``(student_id, week_start)``.

    Entries never expire on their own; they are dropped through
    :meth:`invalidate`, which the local report store calls on every write.
    A status computed across an invalidation of its week is returned but
    not cached.
    """

    def __init__(self) -> None:
        self._cache: Dict[Tuple[int, date], ReportStatus] = {}
        self._generations: Dict[date, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def calculate(
        self,
        report: Optional[WeeklyReportRecord],
        schedule: Iterable[WorkingDay],
    ) -> ReportStatus:
        if report is None:
            return ReportStatus.NONE

        key = report.key
        with self._lock:
            cached = self._cache.get(key)
            generation = (self._epoch, self._generations.get(report.start_date, 0))
        if cached is not None:
            return cached

        status = classify(reported_hours(report), required_hours(report.start_date, schedule))
        with self._lock:
            if generation == (self._epoch, self._generations.get(report.start_date, 0)):
                self._cache[key] = status
        return status

    def cached(self, student_id: int, week_start: DateLike) -> Optional[ReportStatus]:
        with self._lock:
            return self._cache.get((student_id, as_date(week_start)))

    def invalidate(self, week_start: Optional[DateLike] = None) -> None:
        with self._lock:
            if week_start is None:
                self._cache.clear()
                self._epoch += 1
                return
            week_start = as_date(week_start)
            self._generations[week_start] = self._generations.get(week_start, 0) + 1
            for key in [key for key in self._cache if key[1] == week_start]:
                del self._cache[key]
        logger.debug("Invalidated status cache for week %s", week_start)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
