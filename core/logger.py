# core/logger.py
import logging
from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from core.config import AUDIT_ACTOR, LOG_LEVEL


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: str = None):
    """Configure the root logger once for scripts and the app entry point."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_action(db: Session, action: str, actor: str = None):
    """Record a restaurant or category change into the audit log.

    The row is added to the caller's session so it is committed (or rolled
    back) together with the change it describes.
    """
    entry = AuditLog(actor=actor or AUDIT_ACTOR, action=action)
    db.add(entry)
    return entry


def get_audit_trail(db: Session, limit: int = 50):
    """Most recent audit entries first."""
    return db.query(AuditLog).order_by(AuditLog.id.desc()).limit(limit).all()
