"""
Authentication endpoints: OTP request, OTP verification and logout
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from nco_search.config import settings
from nco_search.database import get_db
from nco_search.schemas.auth import (
    OTPRequest, OTPVerify, MessageResponse,
    AuthenticatedUser, VerifyOTPResponse, CurrentUserResponse
)
from nco_search.auth.auth_handler import AuthHandler, get_current_user
from nco_search.auth.permissions import permissions_for
from nco_search.services.audit_logger import AuditLogger, LOGIN
from nco_search.services.otp_service import OTPService, get_otp_service
from nco_search.services.rate_limiter import api_limit, otp_rate_limiter
from nco_search.services.sms_service import SMSDeliveryError, get_sms_client
from nco_search.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/request-otp", response_model=MessageResponse)
@api_limit
async def request_otp(
    request: Request,
    otp_request: OTPRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    sms_client = Depends(get_sms_client)
):
    """Send a one-time passcode to a registered, active phone number"""
    phone = otp_request.phone
    otp_rate_limiter.check(request, phone)

    user_service = UserService(db)
    user = await user_service.get_user_by_phone(phone)

    if not user:
        logger.info(f"Account not found for phone: {phone}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found. Please contact your administrator to register this phone number."
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive. Please contact your administrator."
        )

    # The code is stored before delivery is attempted
    code = otp_service.issue(phone)

    try:
        await sms_client.send_otp(phone, code)
    except SMSDeliveryError as e:
        logger.error(f"OTP delivery failed for {phone}: {e.message}")
        if settings.OTP_ROLLBACK_ON_DELIVERY_FAILURE:
            otp_service.revoke(phone)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    return MessageResponse(message=f"OTP sent successfully to {phone}")

@router.post("/verify-otp", response_model=VerifyOTPResponse)
@api_limit
async def verify_otp(
    request: Request,
    verification: OTPVerify,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service)
):
    """Check a passcode and issue a session token"""
    result = otp_service.verify(verification.phone, verification.otp)

    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message
        )

    user_service = UserService(db)
    user = await user_service.get_active_user(verification.phone)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    await user_service.update_last_login(user.phone)

    auth_handler = AuthHandler()
    token = auth_handler.create_session_token(user)

    await AuditLogger(db).log(LOGIN, user.name, f"Logged in with phone {user.phone}")

    return VerifyOTPResponse(
        user=AuthenticatedUser(
            phone=user.phone,
            role=user.role,
            name=user.name,
            token=token
        ),
        expires_in=int(auth_handler.token_lifetime.total_seconds())
    )

@router.post("/logout", response_model=MessageResponse)
@api_limit
async def logout(request: Request):
    """Logout user (client should discard token)"""
    return MessageResponse(message="Logged out successfully")

@router.get("/me", response_model=CurrentUserResponse)
@api_limit
async def get_current_user_info(
    request: Request,
    current_user: dict = Depends(get_current_user)
):
    """Identity and permission set carried by the session token"""
    return CurrentUserResponse(
        phone=current_user["phone"],
        role=current_user["role"],
        name=current_user["name"] or "",
        permissions=sorted(permissions_for(current_user["role"]))
    )
