from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from reportsync.core.errors import ValidationError
from reportsync.core.schedule import DateLike, as_date, normalize_to_week_start


DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%m/%d/%Y")


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


@dataclass(frozen=True)
class EnrollmentWindow:
    """Bounds the weeks a student may report on.

    ``join_date`` and ``exit_date`` are kept as raw profile strings; an
    unparseable value behaves like a missing one.
    """

    join_date: Optional[str] = None
    exit_date: Optional[str] = None

    @property
    def joined_on(self) -> Optional[date]:
        return parse_date(self.join_date)

    @property
    def exits_on(self) -> Optional[date]:
        return parse_date(self.exit_date)

    def is_reporting_allowed(self, week_start: DateLike, today: Optional[date] = None) -> bool:
        week_start = as_date(week_start)
        today = today or date.today()

        if week_start > today:
            return False

        joined = self.joined_on
        if joined is None:
            return True
        if week_start < normalize_to_week_start(joined):
            return False

        exits = self.exits_on
        if exits is not None and week_start > normalize_to_week_start(exits):
            return False
        return True

    def validate_week(self, week_start: DateLike, today: Optional[date] = None) -> date:
        week_start = normalize_to_week_start(week_start)
        if not self.is_reporting_allowed(week_start, today=today):
            raise ValidationError(f"Reporting is not allowed for the week of {week_start.isoformat()}")
        return week_start

    def first_valid_week(self, today: Optional[date] = None) -> date:
        return normalize_to_week_start(self.joined_on or today or date.today())

    def last_valid_week(self, today: Optional[date] = None) -> date:
        return normalize_to_week_start(self.exits_on or today or date.today())

    def is_date_within_enrollment(self, value: DateLike) -> bool:
        value = as_date(value)
        joined = self.joined_on
        if joined is None or value < joined:
            return False
        exits = self.exits_on
        if exits is not None and value > exits:
            return False
        return True

    def reportable_weeks(self, today: Optional[date] = None) -> Iterator[date]:
        today = today or date.today()
        current = self.first_valid_week(today)
        last = self.last_valid_week(today)
        while current <= last:
            if self.is_reporting_allowed(current, today=today):
                yield current
            current += timedelta(days=7)
