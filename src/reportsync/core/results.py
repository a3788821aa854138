from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from reportsync.core.errors import CorruptCacheError, NotFoundError


T = TypeVar("T")


class LoadState(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    state: LoadState
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "LoadResult[T]":
        return cls(LoadState.OK, value=value)

    @classmethod
    def not_found(cls) -> "LoadResult[T]":
        return cls(LoadState.NOT_FOUND)

    @classmethod
    def corrupt(cls, reason: str) -> "LoadResult[T]":
        return cls(LoadState.CORRUPT, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.state is LoadState.OK

    @property
    def is_corrupt(self) -> bool:
        return self.state is LoadState.CORRUPT

    def unwrap_or_none(self) -> Optional[T]:
        return self.value if self.is_ok else None

    def unwrap(self) -> T:
        if self.state is LoadState.NOT_FOUND:
            raise NotFoundError("No cached entry")
        if self.state is LoadState.CORRUPT:
            raise CorruptCacheError(self.reason or "Unreadable cache entry")
        return self.value
