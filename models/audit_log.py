from sqlalchemy import Column, Integer, String, DateTime
from core.db import Base
from core.utils import utcnow

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor = Column(String, nullable=False)
    action = Column(String, nullable=False)
    timestamp = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<AuditLog {self.actor}: {self.action}>"
