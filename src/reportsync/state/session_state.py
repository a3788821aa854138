from dataclasses import dataclass
from typing import Optional, Protocol

from reportsync.core.errors import AuthError


class TokenProvider(Protocol):
    def get_access_token(self) -> str:
        ...


@dataclass
class SessionState:
    student_id: Optional[int] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.student_id and self.access_token)

    def get_access_token(self) -> str:
        if not self.access_token:
            raise AuthError("Not authenticated")
        return self.access_token

    def clear(self) -> None:
        self.student_id = None
        self.access_token = None
        self.refresh_token = None
