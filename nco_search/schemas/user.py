"""
Pydantic schemas for user operations
"""

from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

from nco_search.auth.permissions import ACCOUNT_ROLES
from nco_search.schemas.common import validate_phone

class UserBase(BaseModel):
    """Base user schema"""
    phone: str = Field(..., description="10-digit mobile number starting with 6-9")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")

class UserCreate(UserBase):
    """Schema for registering an enumerator or administrator"""
    role: Optional[str] = Field("ENUMERATOR", description="User role")
    
    @validator('phone', pre=True)
    def validate_phone_number(cls, v):
        return validate_phone(v)
    
    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v
    
    @validator('role', pre=True, always=True)
    def validate_role(cls, v):
        if v is None or v == "":
            return "ENUMERATOR"
        v = str(v).upper()
        if v not in ACCOUNT_ROLES:
            raise ValueError(f'Role must be one of: {", ".join(ACCOUNT_ROLES)}')
        return v

class UserResponse(UserBase):
    """Schema for user responses"""
    id: int
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class UserListResponse(BaseModel):
    """Schema for user list response"""
    users: list[UserResponse]
    total: int

class UserStatusResponse(BaseModel):
    success: bool = True
    phone: str
    is_active: bool
