"""
Occupation search and selection endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from nco_search.database import get_db
from nco_search.schemas.auth import MessageResponse
from nco_search.schemas.occupation import (
    SearchRequest, SearchResponse, OccupationMatch, OccupationDetail,
    OccupationListResponse, SelectionCreate, OverrideCreate
)
from nco_search.auth.auth_handler import PermissionChecker
from nco_search.auth import permissions
from nco_search.services.audit_logger import AuditLogger, actor_name, SEARCH, SELECTION, OVERRIDE
from nco_search.services.occupation_matcher import OccupationMatcher, get_occupation, list_occupations
from nco_search.services.rate_limiter import api_limit

logger = logging.getLogger(__name__)

router = APIRouter()

def get_matcher() -> OccupationMatcher:
    return OccupationMatcher()

@router.post("/search", response_model=SearchResponse)
@api_limit
async def search_occupations(
    request: Request,
    search: SearchRequest,
    current_user: Optional[dict] = Depends(PermissionChecker(permissions.SEARCH)),
    matcher: OccupationMatcher = Depends(get_matcher),
    db: Session = Depends(get_db)
):
    """Rank occupations for a free-text job description"""
    results = matcher.search(search.query)

    await AuditLogger(db).log(SEARCH, actor_name(current_user), f'Searched for: "{search.query}"')
    logger.info(f"Search '{search.query}' returned {len(results)} result(s)")

    return SearchResponse(
        query=search.query,
        results=[OccupationMatch(**result) for result in results],
        count=len(results)
    )

@router.get("/occupations", response_model=OccupationListResponse)
@api_limit
async def get_occupations(
    request: Request,
    current_user: Optional[dict] = Depends(PermissionChecker(permissions.VIEW_DETAILS))
):
    """Every occupation known to the matcher"""
    occupations = list_occupations()
    return OccupationListResponse(
        occupations=[OccupationDetail(**occupation) for occupation in occupations],
        count=len(occupations)
    )

@router.get("/occupations/{nco_code}", response_model=OccupationDetail)
@api_limit
async def get_occupation_details(
    request: Request,
    nco_code: str,
    current_user: Optional[dict] = Depends(PermissionChecker(permissions.VIEW_DETAILS))
):
    """Detailed information about a single occupation"""
    occupation = get_occupation(nco_code)
    if not occupation:
        raise HTTPException(status_code=404, detail="Occupation not found")
    return OccupationDetail(**occupation)

@router.post("/selections", response_model=MessageResponse, status_code=201)
@api_limit
async def record_selection(
    request: Request,
    selection: SelectionCreate,
    current_user: dict = Depends(PermissionChecker(permissions.SELECT)),
    db: Session = Depends(get_db)
):
    """Record the occupation an enumerator picked"""
    await AuditLogger(db).log(
        SELECTION,
        actor_name(current_user),
        f"Selected occupation: {selection.nco_code} - {selection.title}",
        nco_code=selection.nco_code
    )
    return MessageResponse(message="Selection recorded")

@router.post("/overrides", response_model=MessageResponse, status_code=201)
@api_limit
async def record_override(
    request: Request,
    override: OverrideCreate,
    current_user: dict = Depends(PermissionChecker(permissions.OVERRIDE)),
    db: Session = Depends(get_db)
):
    """Record an administrator's correction of a selection"""
    await AuditLogger(db).log(
        OVERRIDE,
        actor_name(current_user),
        f"Override: Changed from {override.from_code} to {override.to_code}"
    )
    return MessageResponse(message="Override recorded")
