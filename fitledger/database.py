import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlmodel import Session, SQLModel, create_engine

from fitledger.config import get_settings

settings = get_settings()

engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})

# Enable WAL mode for better read performance
if settings.database_url.startswith("sqlite:///") and ":memory:" not in settings.database_url:
    with engine.connect() as _conn:
        _conn.exec_driver_sql("PRAGMA journal_mode=WAL")

# Single logical writer: every mutation and every export snapshot runs under this lock.
_store_lock = threading.RLock()


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def exclusive_access() -> Iterator[None]:
    """Hold exclusive access to the entity store for one operation."""
    with _store_lock:
        yield
