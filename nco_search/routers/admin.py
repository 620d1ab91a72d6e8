"""
Administrative endpoints: synonyms, audit trail and analytics
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from nco_search.database import get_db
from nco_search.schemas.auth import MessageResponse
from nco_search.schemas.occupation import (
    SynonymCreate, SynonymResponse, AuditLogResponse,
    AuditLogListResponse, AnalyticsResponse
)
from nco_search.auth.auth_handler import PermissionChecker
from nco_search.auth import permissions
from nco_search.services.audit_logger import AuditLogger, actor_name, SEARCH, SELECTION, OVERRIDE
from nco_search.services.rate_limiter import api_limit
from nco_search.services.synonym_service import SynonymService
from nco_search.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/synonyms", response_model=list[SynonymResponse])
@api_limit
async def get_synonyms(
    request: Request,
    current_user: dict = Depends(PermissionChecker(permissions.MANAGE_SYNONYMS)),
    db: Session = Depends(get_db)
):
    """All synonym mappings"""
    return [SynonymResponse.model_validate(s) for s in SynonymService(db).list_synonyms()]

@router.post("/synonyms", response_model=SynonymResponse, status_code=201)
@api_limit
async def add_synonym(
    request: Request,
    synonym_data: SynonymCreate,
    current_user: dict = Depends(PermissionChecker(permissions.MANAGE_SYNONYMS)),
    db: Session = Depends(get_db)
):
    """Add a synonym mapping"""
    synonym = await SynonymService(db).add_synonym(synonym_data, actor_name(current_user))
    return SynonymResponse.model_validate(synonym)

@router.delete("/synonyms/{synonym_id}", response_model=MessageResponse)
@api_limit
async def remove_synonym(
    request: Request,
    synonym_id: int,
    current_user: dict = Depends(PermissionChecker(permissions.MANAGE_SYNONYMS)),
    db: Session = Depends(get_db)
):
    """Remove a synonym mapping"""
    await SynonymService(db).remove_synonym(synonym_id, actor_name(current_user))
    return MessageResponse(message="Synonym removed")

@router.get("/audit-logs", response_model=AuditLogListResponse)
@api_limit
async def get_audit_logs(
    request: Request,
    action: Optional[str] = Query(None, description="Filter by action, ALL for no filter"),
    limit: int = Query(100, ge=1, le=500),
    current_user: dict = Depends(PermissionChecker(permissions.VIEW_AUDIT_LOGS)),
    db: Session = Depends(get_db)
):
    """Audit trail, most recent first"""
    logs = AuditLogger(db).get_recent(action.upper() if action else None, limit)
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        count=len(logs)
    )

@router.get("/analytics", response_model=AnalyticsResponse)
@api_limit
async def get_analytics(
    request: Request,
    current_user: dict = Depends(PermissionChecker(permissions.VIEW_DASHBOARD)),
    db: Session = Depends(get_db)
):
    """Usage summary for the admin dashboard"""
    audit = AuditLogger(db)
    return AnalyticsResponse(
        total_searches=audit.count(SEARCH),
        total_selections=audit.count(SELECTION),
        total_overrides=audit.count(OVERRIDE),
        synonym_count=SynonymService(db).count(),
        active_users=await UserService(db).count_active_users(),
        top_selected_codes=audit.top_selected_codes()
    )
