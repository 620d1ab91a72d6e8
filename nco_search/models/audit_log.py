"""
Audit log model for tracking searches, selections and admin changes
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from nco_search.database import Base
from nco_search.utils.clock import utcnow

class AuditLog(Base):
    """Append-only audit trail entry"""
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    action = Column(String(30), nullable=False, index=True)
    actor = Column(String(100), nullable=False)
    details = Column(Text, nullable=True)
    nco_code = Column(String(8), nullable=True, index=True)  # set for SELECTION entries
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor='{self.actor}')>"
