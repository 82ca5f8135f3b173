"""
Device-local SQLite store

One file holds the offline redemption queue and the cached snapshots. The
engine is synchronous: every queue call is a short local transaction that
has committed by the time it returns, so a crash right after enqueue()
never loses the scan.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOCAL_STATE_DIR
from src.platform.logging.loguru_io import Logger
from src.service.check_in_client.driven_adapter.local_store import model  # noqa: F401
from src.service.check_in_client.driven_adapter.local_store.local_base import LocalBase


def default_local_db_path() -> Path:
    if settings.CHECK_IN_LOCAL_DB_PATH:
        return Path(settings.CHECK_IN_LOCAL_DB_PATH)
    return LOCAL_STATE_DIR / 'check_in.db'


def build_local_engine(db_path: Path) -> Engine:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f'sqlite:///{db_path}',
        echo=False,
        connect_args={'check_same_thread': False, 'timeout': 30},
    )

    @event.listens_for(engine, 'connect')
    def _set_sqlite_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA journal_mode=WAL')
        cursor.execute('PRAGMA synchronous=FULL')
        cursor.close()

    return engine


class LocalDatabase:
    """Session provider for the local store (`session_factory=local_database.provided.session`)."""

    def __init__(self, *, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path) if db_path else default_local_db_path()
        self._engine: Optional[Engine] = None
        self._session_maker: Optional[sessionmaker[Session]] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_local_engine(self.db_path)
            LocalBase.metadata.create_all(self._engine, checkfirst=True)
            self._session_maker = sessionmaker(self._engine, expire_on_commit=False)
            Logger.base.info(f'💾 [LOCAL STORE] Opened {self.db_path}')
        return self._engine

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        _ = self.engine
        assert self._session_maker is not None
        with self._session_maker() as session:
            yield session

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_maker = None
