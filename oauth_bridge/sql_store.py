"""
Result store backed by a shared SQL database, for running more than one bridge instance.
Same contract as MemoryResultStore; take is exclusive because only the caller whose
DELETE removes the row returns it.
"""
import json
import logging
import secrets
import time
from typing import Any, Callable

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from oauth_bridge.models import Base, OAuthResultRow
from oauth_bridge.result_store import STATUS_FAILED, STATUS_READY, AuthResult, ResultStore

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    # SQLite: in-memory needs StaticPool so all connections share the same DB (for tests)
    # File-based SQLite needs check_same_thread=False for FastAPI's threadpool
    if database_url.startswith("sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    connect_args = {"check_same_thread": False} if "sqlite" in database_url else {}
    return create_engine(database_url, connect_args=connect_args)


class SqlResultStore(ResultStore):
    def __init__(self, database_url: str, ttl_seconds: float, clock: Callable[[], float] = time.time) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self.engine = make_engine(database_url)
        Base.metadata.create_all(bind=self.engine)
        self._session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _write(self, row: OAuthResultRow) -> None:
        # Two writers may race to insert the same state; retry once as an update
        for attempt in range(2):
            db = self._session()
            try:
                db.merge(row)
                db.commit()
                return
            except IntegrityError:
                db.rollback()
                if attempt == 1:
                    raise
                logger.debug("Concurrent write for state, retrying merge")
            finally:
                db.close()

    def put(self, state: str, tokens: dict[str, Any], *, provider: str = "") -> None:
        self._write(
            OAuthResultRow(
                state=state,
                entry_id=secrets.token_hex(16),
                status=STATUS_READY,
                provider=provider,
                tokens=json.dumps(tokens),
                error=None,
                error_description=None,
                created_at=self._clock(),
            )
        )

    def put_failure(self, state: str, error: str, description: str, *, provider: str = "") -> None:
        self._write(
            OAuthResultRow(
                state=state,
                entry_id=secrets.token_hex(16),
                status=STATUS_FAILED,
                provider=provider,
                tokens=None,
                error=error,
                error_description=description,
                created_at=self._clock(),
            )
        )

    def take(self, state: str) -> AuthResult | None:
        db = self._session()
        try:
            row = db.get(OAuthResultRow, state)
            if row is None:
                return None
            result = AuthResult(
                status=row.status,
                created_at=row.created_at,
                provider=row.provider,
                tokens=row.get_tokens(),
                error=row.error,
                error_description=row.error_description,
            )
            removed = db.execute(
                delete(OAuthResultRow).where(
                    OAuthResultRow.state == state,
                    OAuthResultRow.entry_id == row.entry_id,
                )
            ).rowcount
            db.commit()
        finally:
            db.close()
        if removed != 1:
            # Another poller consumed it first
            return None
        if (self._clock() - result.created_at) > self.ttl_seconds:
            return None
        return result

    def purge_expired(self) -> int:
        cutoff = self._clock() - self.ttl_seconds
        db = self._session()
        try:
            removed = db.execute(delete(OAuthResultRow).where(OAuthResultRow.created_at < cutoff)).rowcount
            db.commit()
        finally:
            db.close()
        return removed or 0

    def __len__(self) -> int:
        db = self._session()
        try:
            return db.scalar(select(func.count()).select_from(OAuthResultRow)) or 0
        finally:
            db.close()
