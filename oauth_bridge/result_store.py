"""
Correlation store: state token -> authorization result, published by the callback and
consumed once by the desktop poller.

put / put_failure overwrite (last writer wins); take removes and returns atomically, so two
pollers racing on one state cannot both get the tokens. Entries older than the TTL read as
absent and are reclaimed by purge_expired (see sweeper.py).
"""
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

STATUS_READY = "ready"
STATUS_FAILED = "failed"


@dataclass
class AuthResult:
    status: str
    created_at: float
    provider: str = ""
    tokens: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    error_description: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Body returned by the poll endpoint for this result."""
        if self.status == STATUS_READY:
            return {"status": STATUS_READY, "provider": self.provider, "tokens": self.tokens}
        return {
            "status": STATUS_FAILED,
            "provider": self.provider,
            "error": self.error,
            "error_description": self.error_description,
        }


class ResultStore(ABC):
    def __init__(self, ttl_seconds: float) -> None:
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def put(self, state: str, tokens: dict[str, Any], *, provider: str = "") -> None:
        raise NotImplementedError

    @abstractmethod
    def put_failure(self, state: str, error: str, description: str, *, provider: str = "") -> None:
        raise NotImplementedError

    @abstractmethod
    def take(self, state: str) -> AuthResult | None:
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError


class MemoryResultStore(ResultStore):
    """Process-local store. Only valid while the service runs as a single instance."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self._results: dict[str, AuthResult] = {}
        self._lock = threading.Lock()

    def _expired(self, result: AuthResult, now: float) -> bool:
        return (now - result.created_at) > self.ttl_seconds

    def _set(self, state: str, result: AuthResult) -> None:
        with self._lock:
            self._results[state] = result

    def put(self, state: str, tokens: dict[str, Any], *, provider: str = "") -> None:
        self._set(state, AuthResult(status=STATUS_READY, created_at=self._clock(), provider=provider, tokens=dict(tokens)))

    def put_failure(self, state: str, error: str, description: str, *, provider: str = "") -> None:
        self._set(
            state,
            AuthResult(
                status=STATUS_FAILED,
                created_at=self._clock(),
                provider=provider,
                error=error,
                error_description=description,
            ),
        )

    def take(self, state: str) -> AuthResult | None:
        with self._lock:
            result = self._results.pop(state, None)
        if result is None or self._expired(result, self._clock()):
            return None
        return result

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [s for s, r in self._results.items() if self._expired(r, now)]
            for s in expired:
                del self._results[s]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


def create_store(database_url: str, ttl_seconds: float) -> ResultStore:
    """Memory store when no database URL is configured, otherwise the shared SQL store."""
    if not database_url:
        return MemoryResultStore(ttl_seconds)
    from oauth_bridge.sql_store import SqlResultStore

    return SqlResultStore(database_url, ttl_seconds)
