from typing import Any, Dict, Optional, Tuple

from reportsync.core.profile import StudentProfile
from reportsync.services.local_store import LocalReportStore
from reportsync.state.app_state import AppState
from reportsync.state.session_state import SessionState
from reportsync.utils.logging import setup_logging


def start_session(
    login_payload: Dict[str, Any],
    store: Optional[LocalReportStore] = None,
) -> Tuple[AppState, StudentProfile]:
    """Build the application context from a successful login response."""
    setup_logging()

    student = StudentProfile.from_login_payload(login_payload)
    data = login_payload.get("data") or {}
    session = SessionState(
        student_id=student.id,
        access_token=data.get("access_token"),
        refresh_token=data.get("refresh_token"),
    )
    if store is None:
        return AppState(session=session), student
    return AppState(session=session, store=store), student
