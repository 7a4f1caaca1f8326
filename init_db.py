from core import db as core_db
from core.db import Base
from core.category_service import ensure_defaults, mark_defaults_ready
from core.logger import configure_logging, get_logger
from core.view_cache import clear_cache

# Import all models FIRST to ensure SQLAlchemy relationships are registered
from models.restaurant import Restaurant
from models.category import Category
from models.image import Image
from models.audit_log import AuditLog

logger = get_logger(__name__)


def init_app(database_url: str = None, **engine_kwargs):
    """Process start-up: bind the engine, create tables and seed the default categories once."""
    engine = core_db.init_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(bind=engine)

    db = core_db.SessionLocal()
    try:
        ensure_defaults(db)
    finally:
        db.close()
    mark_defaults_ready()
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


def shutdown():
    """Process teardown: drop cached views and release the engine."""
    clear_cache()
    mark_defaults_ready(False)
    core_db.dispose_engine()


def init_db(database_url: str = None):
    """Rebuild the database from scratch (drop/create) and seed defaults."""
    engine = core_db.init_engine(database_url)
    logger.info("Rebuilding database (drop/create)...")
    Base.metadata.drop_all(bind=engine)
    shutdown()
    init_app(database_url)
    logger.info("Tables: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    configure_logging()
    init_db()
