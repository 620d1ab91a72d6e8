"""
Pydantic schemas for OTP authentication
"""

from pydantic import BaseModel, Field, validator
from typing import List

from nco_search.schemas.common import validate_phone

class OTPRequest(BaseModel):
    """Body of POST /api/auth/request-otp"""
    phone: str
    
    @validator('phone', pre=True)
    def validate_phone_number(cls, v):
        return validate_phone(v)

class OTPVerify(BaseModel):
    """Body of POST /api/auth/verify-otp"""
    phone: str
    otp: str = Field(..., min_length=1, max_length=10)
    
    @validator('phone', pre=True)
    def validate_phone_number(cls, v):
        return validate_phone(v)
    
    @validator('otp', pre=True)
    def normalize_otp(cls, v):
        if v is None:
            raise ValueError('OTP is required')
        return str(v).strip()

class MessageResponse(BaseModel):
    success: bool = True
    message: str

class AuthenticatedUser(BaseModel):
    phone: str
    role: str
    name: str
    token: str

class VerifyOTPResponse(BaseModel):
    success: bool = True
    user: AuthenticatedUser
    expires_in: int = Field(..., description="Token lifetime in seconds")

class CurrentUserResponse(BaseModel):
    phone: str
    role: str
    name: str
    permissions: List[str]
