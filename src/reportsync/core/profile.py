from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from reportsync.core.enrollment import EnrollmentWindow
from reportsync.core.errors import AuthError
from reportsync.core.schedule import WorkingDay


@dataclass
class StudentProfile:
    id: int
    release_id: int = 0
    join_course_date: Optional[str] = None
    exit_course_date: Optional[str] = None
    working_days: List[WorkingDay] = field(default_factory=list)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    program_id: int = 0

    @property
    def enrollment(self) -> EnrollmentWindow:
        return EnrollmentWindow(self.join_course_date, self.exit_course_date)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email or str(self.id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], days: Optional[List[Dict[str, Any]]] = None) -> "StudentProfile":
        raw_days = days if days is not None else data.get("working_days") or []
        return cls(
            id=int(data.get("id") or 0),
            release_id=int(data.get("release_id") or 0),
            join_course_date=data.get("join_course_date"),
            exit_course_date=data.get("exit_course_date"),
            working_days=[WorkingDay.from_dict(day) for day in raw_days if day],
            email=data.get("email"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            program_id=int(data.get("program_id") or 0),
        )

    @classmethod
    def from_login_payload(cls, payload: Dict[str, Any]) -> "StudentProfile":
        """Build a profile from the login response envelope.

        The envelope carries ``response_code``, an optional ``service_message``
        and ``data`` holding ``student`` plus the schedule under ``days``.
        """
        data = payload.get("data") or {}
        student = data.get("student")
        if payload.get("response_code") != 200 or not student:
            message = payload.get("service_message") or payload.get("message") or "Invalid student data in response"
            raise AuthError(str(message))
        return cls.from_dict(student, days=data.get("days") or [])
