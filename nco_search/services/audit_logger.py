"""
Audit logging service for searches, selections and administrative changes
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional
import logging

from nco_search.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

PUBLIC_ACTOR = "Public User"

# Action kinds
SEARCH = "SEARCH"
SELECTION = "SELECTION"
OVERRIDE = "OVERRIDE"
SYNONYM_ADD = "SYNONYM_ADD"
SYNONYM_REMOVE = "SYNONYM_REMOVE"
LOGIN = "LOGIN"
USER_CREATE = "USER_CREATE"
USER_STATUS = "USER_STATUS"
USER_DELETE = "USER_DELETE"

ACTIONS = (
    SEARCH, SELECTION, OVERRIDE, SYNONYM_ADD, SYNONYM_REMOVE,
    LOGIN, USER_CREATE, USER_STATUS, USER_DELETE,
)

def actor_name(user: Optional[dict]) -> str:
    """Display name recorded for the caller"""
    if not user:
        return PUBLIC_ACTOR
    return user.get("name") or user.get("phone") or PUBLIC_ACTOR

class AuditLogger:
    """Service for writing and reading the audit trail"""
    
    def __init__(self, db: Session):
        self.db = db
    
    async def log(
        self,
        action: str,
        actor: str,
        details: Optional[str] = None,
        nco_code: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Append an entry; failures are logged and never reach the caller"""
        try:
            entry = AuditLog(
                action=action,
                actor=actor,
                details=details,
                nco_code=nco_code
            )
            
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            
            return entry
            
        except Exception as e:
            logger.error(f"Failed to write audit log ({action}): {e}")
            
            try:
                self.db.rollback()
            except Exception as rollback_error:
                logger.error(f"Audit log rollback failed: {rollback_error}")
            
            return None
    
    def get_recent(self, action: Optional[str] = None, limit: int = 100) -> list[AuditLog]:
        """Most recent entries first, optionally filtered by action"""
        query = self.db.query(AuditLog)
        if action and action != "ALL":
            query = query.filter(AuditLog.action == action)
        return (
            query
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )
    
    def count(self, action: str) -> int:
        return self.db.query(AuditLog).filter(AuditLog.action == action).count()
    
    def top_selected_codes(self, limit: int = 5) -> list[dict]:
        """Most frequently selected occupations"""
        rows = (
            self.db.query(AuditLog.nco_code, func.count(AuditLog.id).label("count"))
            .filter(AuditLog.action == SELECTION, AuditLog.nco_code.isnot(None))
            .group_by(AuditLog.nco_code)
            .order_by(func.count(AuditLog.id).desc(), AuditLog.nco_code)
            .limit(limit)
            .all()
        )
        return [{"nco_code": code, "count": count} for code, count in rows]
