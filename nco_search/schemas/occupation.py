"""
Pydantic schemas for occupation search, synonyms and the audit trail
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
import re

NCO_CODE_PATTERN = re.compile(r'^[0-9]{8}$')

def _validate_nco_code(v: str) -> str:
    v = v.strip()
    if not NCO_CODE_PATTERN.match(v):
        raise ValueError('NCO code must be 8 digits')
    return v

class SearchRequest(BaseModel):
    """Free-text job description to classify"""
    query: str = Field(..., min_length=1, max_length=500)

    @validator('query')
    def validate_query(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Search query is required')
        return v

class RelatedOccupation(BaseModel):
    nco_code: str
    title: str

class OccupationDetail(BaseModel):
    nco_code: str
    title: str
    hierarchy: List[str]
    description: str
    tasks: List[str]
    related_occupations: List[RelatedOccupation]

class OccupationMatch(BaseModel):
    """Ranked candidate with a confidence score and justification"""
    nco_code: str
    title: str
    hierarchy: List[str]
    description: str
    confidence: float = Field(..., ge=0, le=1)
    reason: str

class SearchResponse(BaseModel):
    query: str
    results: List[OccupationMatch]
    count: int

class OccupationListResponse(BaseModel):
    occupations: List[OccupationDetail]
    count: int

class SelectionCreate(BaseModel):
    """Occupation chosen by an enumerator for a search"""
    nco_code: str
    title: str = Field(..., min_length=1, max_length=200)

    @validator('nco_code')
    def validate_code(cls, v):
        return _validate_nco_code(v)

class OverrideCreate(BaseModel):
    """Administrator correction of a previous selection"""
    from_code: str
    to_code: str

    @validator('from_code', 'to_code')
    def validate_codes(cls, v):
        return _validate_nco_code(v)

class SynonymCreate(BaseModel):
    synonym: str = Field(..., min_length=1, max_length=100)
    nco_code: str
    occupation: str = Field(..., min_length=1, max_length=200)

    @validator('synonym', 'occupation')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Synonym and occupation must not be blank')
        return v

    @validator('nco_code')
    def validate_code(cls, v):
        return _validate_nco_code(v)

class SynonymResponse(BaseModel):
    id: int
    synonym: str
    nco_code: str
    occupation: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AuditLogResponse(BaseModel):
    id: int
    timestamp: datetime
    action: str
    actor: str
    details: Optional[str] = None
    nco_code: Optional[str] = None

    class Config:
        from_attributes = True

class AuditLogListResponse(BaseModel):
    logs: List[AuditLogResponse]
    count: int

class AnalyticsResponse(BaseModel):
    total_searches: int
    total_selections: int
    total_overrides: int
    synonym_count: int
    active_users: int
    top_selected_codes: List[dict]
