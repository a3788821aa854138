from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Optional

from reportsync.core.schedule import (
    DateLike,
    WorkingDay,
    as_date,
    duration_hours,
    hour_slots,
    iso_week,
    normalize_to_week_start,
    week_days,
    working_day_for,
)


def _date_to_wire(value: date) -> str:
    return datetime.combine(value, datetime.min.time()).isoformat()


def _date_from_wire(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).replace("Z", "+00:00")
    if "T" in text:
        return datetime.fromisoformat(text).date()
    return date.fromisoformat(text)


def _datetime_from_wire(value: Any) -> datetime:
    if not value:
        return datetime.now()
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class HourlyReportSlot:
    start_time: str
    end_time: str
    subject_id: int = 0
    topic_id: int = 0
    subject_name: Optional[str] = None
    topic_name: Optional[str] = None
    learning_description: Optional[str] = None
    is_submitted: bool = False
    last_updated: datetime = field(default_factory=datetime.now)

    @property
    def time_range(self) -> str:
        return f"{self.start_time}-{self.end_time}"

    @property
    def is_reported(self) -> bool:
        return bool(self.learning_description)

    @property
    def hours(self) -> float:
        return duration_hours(self.start_time, self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "subjectId": self.subject_id,
            "topicId": self.topic_id,
            "subjectName": self.subject_name,
            "topicName": self.topic_name,
            "learningDescription": self.learning_description,
            "isSubmitted": self.is_submitted,
            "lastUpdated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HourlyReportSlot":
        return cls(
            start_time=str(data["startTime"]),
            end_time=str(data["endTime"]),
            subject_id=int(data.get("subjectId") or 0),
            topic_id=int(data.get("topicId") or 0),
            subject_name=data.get("subjectName"),
            topic_name=data.get("topicName"),
            learning_description=data.get("learningDescription"),
            is_submitted=bool(data.get("isSubmitted", False)),
            last_updated=_datetime_from_wire(data.get("lastUpdated")),
        )


@dataclass
class DailyReportRecord:
    date: date
    hourly_reports: List[HourlyReportSlot] = field(default_factory=list)
    daily_summary: Optional[str] = None
    primary_subject_id: int = 0
    primary_topic_id: int = 0
    hours_reported: float = 0.0

    def update_hours_reported(self) -> float:
        self.hours_reported = sum(slot.hours for slot in self.hourly_reports if slot.is_reported)
        return self.hours_reported

    def find_slot(self, start_time: str, end_time: str) -> Optional[HourlyReportSlot]:
        for slot in self.hourly_reports:
            if slot.start_time == start_time and slot.end_time == end_time:
                return slot
        return None

    def update_slot(
        self,
        start_time: str,
        end_time: str,
        *,
        learning_description: Optional[str] = None,
        subject_id: Optional[int] = None,
        subject_name: Optional[str] = None,
        topic_id: Optional[int] = None,
        topic_name: Optional[str] = None,
    ) -> HourlyReportSlot:
        slot = self.find_slot(start_time, end_time)
        if slot is None:
            raise KeyError(f"No slot {start_time}-{end_time} on {self.date.isoformat()}")

        if learning_description is not None:
            slot.learning_description = learning_description
        if subject_id is not None:
            slot.subject_id = subject_id
            slot.subject_name = subject_name
        if topic_id is not None:
            slot.topic_id = topic_id
            slot.topic_name = topic_name
        slot.last_updated = datetime.now()
        return slot

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _date_to_wire(self.date),
            "primarySubjectId": self.primary_subject_id,
            "primaryTopicId": self.primary_topic_id,
            "hourlyReports": [slot.to_dict() for slot in self.hourly_reports],
            "hoursReported": self.hours_reported,
            "dailySummary": self.daily_summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyReportRecord":
        return cls(
            date=_date_from_wire(data["date"]),
            hourly_reports=[HourlyReportSlot.from_dict(item) for item in data.get("hourlyReports") or []],
            daily_summary=data.get("dailySummary"),
            primary_subject_id=int(data.get("primarySubjectId") or 0),
            primary_topic_id=int(data.get("primaryTopicId") or 0),
            hours_reported=float(data.get("hoursReported") or 0),
        )


@dataclass
class WeeklyReportRecord:
    student_id: int
    start_date: date
    end_date: date
    week_number: int
    year: int
    daily_reports: List[DailyReportRecord] = field(default_factory=list)
    weekly_summary: Optional[str] = None
    total_hours_reported: float = 0.0
    subjects_covered: List[int] = field(default_factory=list)
    is_complete: bool = False

    @classmethod
    def empty(cls, student_id: int, week_start: DateLike) -> "WeeklyReportRecord":
        start = normalize_to_week_start(week_start)
        year, week_number = iso_week(start)
        return cls(
            student_id=student_id,
            start_date=start,
            end_date=start + timedelta(days=6),
            week_number=week_number,
            year=year,
        )

    @property
    def key(self) -> tuple:
        return self.student_id, self.start_date

    def slots(self) -> Iterator[HourlyReportSlot]:
        for daily in self.daily_reports:
            yield from daily.hourly_reports

    def day(self, value: DateLike) -> DailyReportRecord:
        value = as_date(value)
        for daily in self.daily_reports:
            if daily.date == value:
                return daily
        raise KeyError(f"{value.isoformat()} is not part of the week of {self.start_date.isoformat()}")

    def update_totals(self) -> None:
        total = 0.0
        subjects: List[int] = []
        for daily in self.daily_reports:
            total += daily.update_hours_reported()
            for slot in daily.hourly_reports:
                if slot.subject_id > 0 and slot.subject_id not in subjects:
                    subjects.append(slot.subject_id)
        self.total_hours_reported = total
        self.subjects_covered = subjects

    def mark_submitted(self) -> None:
        for slot in self.slots():
            slot.is_submitted = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "weekNumber": self.week_number,
            "year": self.year,
            "startDate": _date_to_wire(self.start_date),
            "endDate": _date_to_wire(self.end_date),
            "dailyReports": [daily.to_dict() for daily in self.daily_reports],
            "totalHoursReported": self.total_hours_reported,
            "subjectsCovered": list(self.subjects_covered),
            "weeklySummary": self.weekly_summary,
            "isComplete": self.is_complete,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeeklyReportRecord":
        start = _date_from_wire(data["startDate"])
        end = data.get("endDate")
        year, week_number = iso_week(start)
        return cls(
            student_id=int(data.get("studentId") or 0),
            start_date=start,
            end_date=_date_from_wire(end) if end else start + timedelta(days=6),
            week_number=int(data.get("weekNumber") or week_number),
            year=int(data.get("year") or year),
            daily_reports=[DailyReportRecord.from_dict(item) for item in data.get("dailyReports") or []],
            weekly_summary=data.get("weeklySummary"),
            total_hours_reported=float(data.get("totalHoursReported") or 0),
            subjects_covered=[int(item) for item in data.get("subjectsCovered") or []],
            is_complete=bool(data.get("isComplete", False)),
        )


def initialize_week(
    week_start: DateLike,
    schedule: Optional[Iterable[WorkingDay]],
    student_id: int = 0,
) -> WeeklyReportRecord:
    report = WeeklyReportRecord.empty(student_id, week_start)
    schedule = list(schedule or [])

    for day in week_days(report.start_date):
        daily = DailyReportRecord(date=day)
        working_day = working_day_for(day, schedule)
        if working_day is not None:
            daily.hourly_reports = [
                HourlyReportSlot(start_time=start, end_time=end) for start, end in hour_slots(working_day)
            ]
        report.daily_reports.append(daily)

    return report
