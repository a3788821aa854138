from datetime import date
import logging
from pathlib import Path
from typing import Callable, List, Union

from reportsync.config.settings import settings
from reportsync.core.reports import WeeklyReportRecord
from reportsync.core.results import LoadResult
from reportsync.core.schedule import DateLike, as_date
from reportsync.utils.files import read_json, write_json_atomic


logger = logging.getLogger(__name__)

ChangeListener = Callable[[date], None]


class LocalReportStore:
    """One JSON draft per report week, named after the week's Monday."""

    FILE_PREFIX = "WeekReport_"

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self._listeners: List[ChangeListener] = []

    @classmethod
    def from_settings(cls) -> "LocalReportStore":
        return cls(settings.reports_dir)

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self, week_start: date) -> None:
        for listener in list(self._listeners):
            listener(week_start)

    def path_for(self, week_start: DateLike) -> Path:
        return self.directory / f"{self.FILE_PREFIX}{as_date(week_start).isoformat()}.json"

    def exists(self, week_start: DateLike) -> bool:
        return self.path_for(week_start).is_file()

    def save(self, week_start: DateLike, report: WeeklyReportRecord) -> bool:
        week_start = as_date(week_start)
        path = self.path_for(week_start)
        try:
            write_json_atomic(path, report.to_dict())
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save report draft %s: %s", path, exc)
            return False
        self._notify(week_start)
        return True

    def load(self, week_start: DateLike) -> LoadResult[WeeklyReportRecord]:
        path = self.path_for(week_start)
        if not path.is_file():
            return LoadResult.not_found()
        try:
            return LoadResult.ok(WeeklyReportRecord.from_dict(read_json(path)))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring unreadable report draft %s: %s", path, exc)
            return LoadResult.corrupt(str(exc))

    def remove(self, week_start: DateLike) -> bool:
        week_start = as_date(week_start)
        path = self.path_for(week_start)
        removed = True
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Failed to remove report draft %s: %s", path, exc)
            removed = False
        self._notify(week_start)
        return removed

    def list_weeks(self) -> List[date]:
        weeks: List[date] = []
        if not self.directory.is_dir():
            return weeks
        for path in sorted(self.directory.glob(f"{self.FILE_PREFIX}*.json")):
            try:
                weeks.append(date.fromisoformat(path.stem[len(self.FILE_PREFIX):]))
            except ValueError:
                continue
        return weeks
