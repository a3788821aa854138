from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


DateLike = Union[date, datetime]

TIME_FORMATS = ("%H:%M:%S", "%H:%M")


@dataclass(frozen=True)
class WorkingDay:
    # 1 = Monday ... 7 = Sunday
    day_number: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    id: int = 0
    course_plan_id: int = 0
    day_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkingDay":
        return cls(
            day_number=int(data.get("day_number") or 0),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            id=int(data.get("id") or 0),
            course_plan_id=int(data.get("course_plan_id") or 0),
            day_name=data.get("day_name"),
        )

    def hours(self) -> Optional[Tuple[timedelta, timedelta]]:
        start = parse_time(self.start_time)
        end = parse_time(self.end_time)
        if start is None or end is None:
            return None
        return start, end


def parse_time(value: Optional[str]) -> Optional[timedelta]:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` string into an offset from midnight."""
    if not value:
        return None
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
        return timedelta(hours=parsed.hour, minutes=parsed.minute, seconds=parsed.second)
    return None


def format_time(value: timedelta) -> str:
    total_minutes = int(value.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours % 24:02d}:{minutes:02d}"


def duration_hours(start: Optional[str], end: Optional[str]) -> float:
    start_offset = parse_time(start)
    end_offset = parse_time(end)
    if start_offset is None or end_offset is None:
        return 0.0
    return (end_offset - start_offset).total_seconds() / 3600


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_to_week_start(value: DateLike) -> date:
    day = as_date(value)
    # isoweekday() keeps Sunday at 7, so the offset is never negative
    return day - timedelta(days=day.isoweekday() - 1)


def week_days(week_start: DateLike) -> List[date]:
    start = as_date(week_start)
    return [start + timedelta(days=offset) for offset in range(7)]


def iso_week(value: DateLike) -> Tuple[int, int]:
    """Return ``(year, week_number)`` by ISO-8601 rules."""
    year, week, _ = as_date(value).isocalendar()
    return year, week


def working_day_for(day: date, schedule: Iterable[WorkingDay]) -> Optional[WorkingDay]:
    weekday = day.isoweekday()
    for working_day in schedule:
        if working_day is not None and working_day.day_number == weekday:
            return working_day
    return None


def required_hours(week_start: DateLike, schedule: Iterable[WorkingDay]) -> float:
    schedule = list(schedule or [])
    total = 0.0
    for day in week_days(week_start):
        working_day = working_day_for(day, schedule)
        if working_day is None:
            continue
        total += duration_hours(working_day.start_time, working_day.end_time)
    return total


def hour_slots(working_day: WorkingDay) -> List[Tuple[str, str]]:
    """Split a working day into whole one-hour ``(start, end)`` ranges.

    A trailing remainder shorter than an hour does not get a slot.
    """
    bounds = working_day.hours()
    if bounds is None:
        return []
    start, end = bounds
    step = timedelta(hours=1)

    slots: List[Tuple[str, str]] = []
    current = start
    while current + step <= end:
        slots.append((format_time(current), format_time(current + step)))
        current += step
    return slots
