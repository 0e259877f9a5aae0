"""
Shared plumbing for the stores

A store either owns its sessions (one short transaction per call) or is
bound to a caller's session, in which case it never commits and the
enclosing transaction decides the outcome.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from marketplace.stores.errors import DuplicateRecordError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class BaseStore:
    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        session: Optional[Session] = None,
    ):
        if (session_factory is None) == (session is None):
            raise ValueError("Provide exactly one of session_factory or session")
        self._session_factory = session_factory
        self._session = session

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    def with_session(self, session: Session):
        """Return a copy of this store bound to ``session``."""
        return type(self)(session=session)

    @contextmanager
    def _scope(self) -> Iterator[Session]:
        if self._session is not None:
            yield self._session
            return

        session = self._session_factory()
        try:
            with session.begin():
                yield session
        finally:
            session.close()

    @staticmethod
    def _flush(session: Session, what: str) -> None:
        """Flush pending writes, turning unique-constraint violations into DuplicateRecordError.

        Any other integrity failure (NOT NULL, CHECK, foreign key) propagates
        unchanged.
        """
        try:
            session.flush()
        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise
            logger.info("Unique constraint violation while saving %s: %s", what, exc.orig)
            raise DuplicateRecordError(what) from exc


def is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg2 reports SQLSTATE 23505; sqlite only says so in the message
    if getattr(exc.orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "unique constraint" in str(exc.orig).lower()
