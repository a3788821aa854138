import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError
import requests
from requests import RequestException

from reportsync.config.settings import settings
from reportsync.core.errors import ReleaseFetchError
from reportsync.core.profile import StudentProfile
from reportsync.core.release import Release, ReleaseEnvelope
from reportsync.core.results import LoadResult
from reportsync.state.session_state import TokenProvider
from reportsync.utils.files import read_json, write_json_atomic


logger = logging.getLogger(__name__)


class RemoteReleaseGateway:
    READ_PATH = "/release/read/"

    def __init__(
        self,
        base_url: str,
        tokens: TokenProvider,
        *,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ReleaseFetchError("Missing REPORTSYNC_API_BASE_URL in environment")
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, tokens: TokenProvider) -> "RemoteReleaseGateway":
        return cls(settings.api_base_url, tokens, timeout=settings.request_timeout)

    def fetch(self, release_id: int) -> ReleaseEnvelope:
        headers = {"Authorization": f"Bearer {self.tokens.get_access_token()}"}
        url = f"{self.base_url}{self.READ_PATH}"
        try:
            res = self.session.get(url, headers=headers, params={"id": release_id}, timeout=self.timeout)
        except RequestException as exc:
            raise ReleaseFetchError(f"RELEASE_SERVICE_UNAVAILABLE: {exc}") from exc

        if res.status_code >= 400:
            raise ReleaseFetchError("Failed to fetch release data", status_code=res.status_code)

        try:
            return ReleaseEnvelope.model_validate(res.json())
        except (ValueError, PydanticValidationError) as exc:
            raise ReleaseFetchError("Invalid response format", status_code=res.status_code) from exc


class CurriculumCache:
    """Keeps the release envelope assigned to a student on disk.

    Entries never expire. A file is valid while the id stored in it matches
    the requested id.
    """

    def __init__(self, directory: Union[str, Path], gateway: RemoteReleaseGateway) -> None:
        self.directory = Path(directory)
        self.gateway = gateway

    @classmethod
    def from_settings(cls, tokens: TokenProvider) -> "CurriculumCache":
        return cls(settings.releases_dir, RemoteReleaseGateway.from_settings(tokens))

    def path_for(self, release_id: int) -> Path:
        return self.directory / f"release_{release_id}.json"

    def load_cached(self, release_id: int) -> LoadResult[Release]:
        path = self.path_for(release_id)
        if not path.is_file():
            return LoadResult.not_found()
        try:
            envelope = ReleaseEnvelope.model_validate(read_json(path))
        except (OSError, ValueError, PydanticValidationError) as exc:
            logger.warning("Ignoring unreadable release cache %s: %s", path, exc)
            return LoadResult.corrupt(str(exc))
        if envelope.data is None or envelope.data.id != release_id:
            return LoadResult.corrupt(f"cached release does not match id {release_id}")
        return LoadResult.ok(envelope.data)

    def is_valid(self, release_id: int) -> bool:
        return self.load_cached(release_id).is_ok

    def _persist(self, release_id: int, envelope: ReleaseEnvelope) -> None:
        path = self.path_for(release_id)
        try:
            write_json_atomic(path, envelope.model_dump(mode="json"))
        except OSError as exc:
            logger.error("Failed to cache release %s at %s: %s", release_id, path, exc)

    def get(self, student: StudentProfile, force_refresh: bool = False) -> Release:
        release_id = student.release_id
        if not force_refresh:
            cached = self.load_cached(release_id)
            if cached.is_ok:
                return cached.unwrap()

        envelope = self.gateway.fetch(release_id)
        if not envelope.is_successful:
            raise ReleaseFetchError(envelope.error_message(), status_code=envelope.response_code)

        self._persist(release_id, envelope)
        logger.info("Cached release %s for student %s", release_id, student.id)
        return envelope.data
