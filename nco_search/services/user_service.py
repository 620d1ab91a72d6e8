"""
User service for the credential store
Handles all user-related business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError
from fastapi import HTTPException, status
from types import SimpleNamespace
from typing import Optional
import logging

from nco_search.config import settings
from nco_search.models.user import User
from nco_search.schemas.user import UserCreate
from nco_search.utils.clock import utcnow
from nco_search.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

# Display names for the offline demo numbers
DEMO_USER_NAMES = {
    "8248805628": "User (Verified)",
    "9876543210": "Test Enumerator",
}

class UserService:
    """Service for user management operations"""

    def __init__(self, db: Session):
        self.db = db

    def _demo_user(self, phone: str):
        """Stand-in account used only when the offline demo bypass is switched on"""
        if not settings.DEMO_BYPASS_ENABLED or phone not in settings.demo_phones_list:
            return None
        logger.warning(f"Database unreachable, demo bypass admitting {phone}")
        return SimpleNamespace(
            phone=phone,
            name=DEMO_USER_NAMES.get(phone, "Demo Enumerator"),
            role="ENUMERATOR",
            is_active=True,
            last_login=None
        )

    async def get_user_by_phone(self, phone: str) -> Optional[User]:
        """Get user by phone, active or not"""
        try:
            return self.db.query(User).filter(User.phone == phone).first()
        except OperationalError as e:
            self.db.rollback()
            demo_user = self._demo_user(phone)
            if demo_user is not None:
                return demo_user
            logger.error(f"Failed to look up user {phone}: {e}")
            raise DatabaseError("User lookup failed", e)

    async def get_active_user(self, phone: str) -> Optional[User]:
        """Get user by phone if the account may authenticate"""
        user = await self.get_user_by_phone(phone)
        if user is None or not user.is_active:
            return None
        return user

    async def create_user(self, user_data: UserCreate) -> User:
        """Register a new user account"""
        existing_user = self.db.query(User).filter(User.phone == user_data.phone).first()
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A user with this phone number already exists"
            )

        try:
            db_user = User(
                phone=user_data.phone,
                name=user_data.name,
                role=user_data.role,
                is_active=True
            )

            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)

            logger.info(f"New user created: {db_user.name} ({db_user.phone})")
            return db_user

        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A user with this phone number already exists"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise DatabaseError(f"Failed to create user account: {str(e)}", e)

    async def update_last_login(self, phone: str) -> None:
        """Stamp the login time; a failure here never blocks a login"""
        try:
            user = self.db.query(User).filter(User.phone == phone).first()
            if user:
                user.last_login = utcnow()
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating last login for {phone}: {e}")

    async def list_users(self, include_inactive: bool = False) -> list[User]:
        """List users, newest first"""
        try:
            query = self.db.query(User)
            if not include_inactive:
                query = query.filter(User.is_active == True)
            return query.order_by(User.created_at.desc(), User.id.desc()).all()
        except Exception as e:
            logger.error(f"Failed to fetch users: {e}")
            raise DatabaseError(f"Failed to retrieve users: {str(e)}", e)

    async def count_active_users(self) -> int:
        return self.db.query(User).filter(User.is_active == True).count()

    def _require_user(self, phone: str) -> User:
        user = self.db.query(User).filter(User.phone == phone).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return user

    async def toggle_status(self, phone: str) -> User:
        """Flip the active flag"""
        user = self._require_user(phone)
        try:
            user.is_active = not user.is_active
            user.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"{'Activated' if user.is_active else 'Deactivated'} user: {user.phone}")
            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to toggle status for {phone}: {e}")
            raise DatabaseError(f"Failed to toggle user status: {str(e)}", e)

    async def delete_user(self, phone: str) -> None:
        """Remove a user permanently"""
        user = self._require_user(phone)
        try:
            self.db.delete(user)
            self.db.commit()
            logger.info(f"Deleted user: {phone}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {phone}: {e}")
            raise DatabaseError(f"Failed to delete user: {str(e)}", e)
