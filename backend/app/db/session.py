from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
import os
import threading

"""Database session / engine configuration.

Tasks and team members live in an in-memory SQLite database by default. A
plain ":memory:" URL creates a new database per connection, so the engine
pins a single shared connection (StaticPool) and every session sees the
same data for the lifetime of the process. Set DATABASE_URL to use a file.
"""

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")

_is_memory = DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL

engine = create_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    **({"poolclass": StaticPool} if _is_memory else {}),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

class Base(DeclarativeBase):
    pass

# Import models to register metadata
from . import models  # noqa: E402,F401

_init_lock = threading.Lock()
_tables_created = False

def _ensure_tables():
    global _tables_created
    if _tables_created:
        return
    with _init_lock:
        if not _tables_created:
            Base.metadata.create_all(bind=engine)
            _tables_created = True

# Dependency
def get_db():
    _ensure_tables()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
