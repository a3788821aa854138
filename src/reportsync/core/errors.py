from typing import Optional


class ReportSyncError(Exception):
    pass


class ValidationError(ReportSyncError):
    pass


class NotFoundError(ReportSyncError):
    pass


class CorruptCacheError(ReportSyncError):
    pass


class AuthError(ReportSyncError):
    pass


class TransportError(ReportSyncError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


class ReleaseFetchError(TransportError):
    pass
