# core/db.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL

Base = declarative_base()

# SessionLocal factory: expire_on_commit=False avoids needing refresh() in many places
SessionLocal = sessionmaker(autoflush=False, autocommit=False, expire_on_commit=False, future=True)

engine = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str = None, **kwargs):
    """Create an engine; SQLite gets check_same_thread off and FK enforcement on."""
    url = url or DATABASE_URL
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    new_engine = create_engine(url, future=True, connect_args=connect_args, **kwargs)
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def init_engine(url: str = None, **kwargs):
    """Bind SessionLocal to a (new) engine and return it."""
    global engine
    if engine is not None:
        engine.dispose()
    engine = make_engine(url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


def dispose_engine():
    global engine
    if engine is not None:
        engine.dispose()
        engine = None


def get_db():
    """Yield a SQLAlchemy session (use: `for db in get_db():` or as a request dependency)."""
    if engine is None:
        init_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
