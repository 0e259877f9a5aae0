"""
Transaction scope shared by several stores

A Transaction carries store instances bound to one session. It is only
obtained through ``transaction()``, which commits when the block exits
normally and rolls back on every other exit.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from marketplace.core.database import Database
from marketplace.stores.applications import ApplicationStore
from marketplace.stores.invoices import InvoiceStore
from marketplace.stores.jobs import JobStore

logger = logging.getLogger(__name__)


class Transaction:
    def __init__(self, session: Session):
        self.session = session
        self.jobs = JobStore(session=session)
        self.invoices = InvoiceStore(session=session)
        self.applications = ApplicationStore(session=session)


@contextmanager
def transaction(database: Database) -> Iterator[Transaction]:
    session = database.session_factory()
    try:
        with session.begin():
            yield Transaction(session)
    except BaseException:
        logger.debug("Transaction rolled back")
        raise
    finally:
        session.close()


class Stores:
    """Session-owning stores for single-statement operations."""

    def __init__(self, database: Database):
        self.database = database
        self.jobs = JobStore(session_factory=database.session_factory)
        self.invoices = InvoiceStore(session_factory=database.session_factory)
        self.applications = ApplicationStore(session_factory=database.session_factory)

    def transaction(self):
        return transaction(self.database)
