"""Database engine and session management."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy.pool import Pool
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from avatarvoice.database.settings import DatabaseSettings
from avatarvoice.database.settings import settings as default_settings


class Database:
    """Owns the engine shared by every database-backed store.

    Stores are called from worker threads, so sessions are serialised with a
    re-entrant lock; SQLite only ever sees one writer at a time.
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        poolclass: type[Pool] | None = None,
    ) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        engine_kwargs = {}
        if poolclass is not None:
            engine_kwargs["poolclass"] = poolclass
        self.url = url
        self.engine = create_engine(
            url,
            echo=echo,
            connect_args=connect_args,
            **engine_kwargs,
        )
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> "Database":
        """Create a file-backed database, making sure its directory exists."""
        settings = settings or default_settings
        if settings.sqlite_path != ":memory:":
            Path(settings.sqlite_path).parent.mkdir(parents=True, exist_ok=True)
            return cls(settings.database_url, echo=settings.echo)
        return cls.in_memory(echo=settings.echo)

    @classmethod
    def in_memory(cls, echo: bool = False) -> "Database":
        """Private in-memory database (one shared connection)."""
        return cls("sqlite://", echo=echo, poolclass=StaticPool)

    def create_all(self) -> None:
        """Create all tables."""
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Open a session while holding the database lock.

        Yields:
            SQLModel Session instance.
        """
        with self._lock, Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
