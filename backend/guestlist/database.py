"""Engine, session factory and declarative base."""
import re

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from guestlist.config import settings

Base = declarative_base()

_WORD_RE = re.compile(r"\w+")


def _trigrams(text: str) -> set[str]:
    """Trigram set of a string, computed per word the way pg_trgm does it."""
    grams: set[str] = set()
    for word in _WORD_RE.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[i:i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left, right) -> float:
    """Jaccard similarity of trigram sets; mirrors pg_trgm's similarity()."""
    if not left or not right:
        return 0.0
    a, b = _trigrams(left), _trigrams(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def register_sqlite_functions(engine) -> None:
    """Give SQLite connections the pieces PostgreSQL provides natively."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, connection_record):
        # Let SQLAlchemy drive BEGIN so SAVEPOINTs behave under pysqlite
        dbapi_conn.isolation_level = None
        dbapi_conn.create_function("similarity", 2, trigram_similarity, deterministic=True)
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _make_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        register_sqlite_functions(engine)
        return engine
    return create_engine(url, pool_pre_ping=True)


engine = _make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
