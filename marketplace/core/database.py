"""
Database connection and session management
Configured for PostgreSQL, with SQLite support for local runs and tests
"""
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from marketplace.core.config import settings

Base = declarative_base()


def create_db_engine(
    url: str,
    echo: bool = False,
    isolation_level: Optional[str] = None,
    **kwargs,
) -> Engine:
    """Create an engine with the settings each backend needs"""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(url, connect_args=connect_args, echo=echo, **kwargs)

    if isolation_level:
        kwargs["isolation_level"] = isolation_level
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,
        echo=echo,
        **kwargs,
    )


class Database:
    """
    Owns the engine and the session factory.

    Sessions keep loaded attributes after commit so services can return
    entities to callers once the transaction is closed.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "Database":
        return cls(create_db_engine(url, **kwargs))

    def create_all(self) -> None:
        from marketplace.models import application, invoice, job  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


@lru_cache
def get_database() -> Database:
    """Process-wide database built from settings"""
    return Database.from_url(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        isolation_level=settings.DB_ISOLATION_LEVEL,
    )


def init_db():
    """Initialize database tables"""
    get_database().create_all()
