from dataclasses import dataclass, field

from reportsync.core.profile import StudentProfile
from reportsync.core.status import StatusEngine
from reportsync.services.local_store import LocalReportStore
from reportsync.services.release_cache import CurriculumCache
from reportsync.services.report_gateway import RemoteReportGateway
from reportsync.services.report_service import ReportSyncService
from reportsync.state.session_state import SessionState


@dataclass
class AppState:
    session: SessionState = field(default_factory=SessionState)
    status_engine: StatusEngine = field(default_factory=StatusEngine)
    store: LocalReportStore = field(default_factory=LocalReportStore.from_settings)

    def __post_init__(self) -> None:
        self.store.subscribe(self.status_engine.invalidate)

    def report_service(self, student: StudentProfile) -> ReportSyncService:
        return ReportSyncService(
            student,
            self.store,
            RemoteReportGateway.from_settings(self.session),
            self.status_engine,
        )

    def curriculum_cache(self) -> CurriculumCache:
        return CurriculumCache.from_settings(self.session)
