"""
User management endpoints (admin only)
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from nco_search.database import get_db
from nco_search.schemas.common import clean_phone
from nco_search.schemas.user import UserCreate, UserResponse, UserListResponse, UserStatusResponse
from nco_search.auth.auth_handler import admin_required
from nco_search.schemas.auth import MessageResponse
from nco_search.services.audit_logger import AuditLogger, actor_name, USER_CREATE, USER_STATUS, USER_DELETE
from nco_search.services.rate_limiter import api_limit
from nco_search.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

def _reject_self_action(current_user: dict, phone: str, action: str) -> None:
    if current_user["phone"] == phone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot {action} your own account"
        )

@router.get("", response_model=UserListResponse)
@api_limit
async def list_users(
    request: Request,
    include_inactive: bool = False,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """List active users, or every user with include_inactive=true"""
    users = await UserService(db).list_users(include_inactive)
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=len(users)
    )

@router.post("", response_model=UserResponse, status_code=201)
@api_limit
async def create_user(
    request: Request,
    user_data: UserCreate,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Register a new enumerator or administrator"""
    new_user = await UserService(db).create_user(user_data)

    await AuditLogger(db).log(
        USER_CREATE,
        actor_name(current_user),
        f"Registered {new_user.role} {new_user.name} ({new_user.phone})"
    )
    return UserResponse.model_validate(new_user)

@router.post("/{phone}/toggle-status", response_model=UserStatusResponse)
@api_limit
async def toggle_user_status(
    request: Request,
    phone: str,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Activate an inactive user or deactivate an active one"""
    phone = clean_phone(phone)
    _reject_self_action(current_user, phone, "deactivate")

    user = await UserService(db).toggle_status(phone)

    await AuditLogger(db).log(
        USER_STATUS,
        actor_name(current_user),
        f"{'Activated' if user.is_active else 'Deactivated'} user {user.phone}"
    )
    logger.info(f"Admin {current_user['phone']} set {phone} active={user.is_active}")
    return UserStatusResponse(phone=user.phone, is_active=user.is_active)

@router.delete("/{phone}", response_model=MessageResponse)
@api_limit
async def delete_user(
    request: Request,
    phone: str,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Remove a user permanently"""
    phone = clean_phone(phone)
    _reject_self_action(current_user, phone, "delete")

    await UserService(db).delete_user(phone)

    await AuditLogger(db).log(USER_DELETE, actor_name(current_user), f"Deleted user {phone}")
    return MessageResponse(message="User deleted successfully")
