"""
Session tokens and the access gate for protected routes
"""

from datetime import timedelta
from typing import Optional
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
import logging

from nco_search.config import settings
from nco_search.auth.permissions import Role, has_permission
from nco_search.utils.clock import utcnow

logger = logging.getLogger(__name__)

# Missing credentials are reported by the gate itself, not by HTTPBearer
security = HTTPBearer(auto_error=False)

class AuthHandler:
    """Mints and verifies signed session tokens"""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    def create_session_token(self, user, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT binding phone, role and name to a fixed expiry"""
        expire = utcnow() + (expires_delta or self.token_lifetime)
        to_encode = {
            "sub": user.phone,
            "phone": user.phone,
            "role": user.role,
            "name": user.name,
            "exp": expire,
        }
        encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        logger.info(f"Session token issued for {user.name}")
        return encoded_jwt

    def verify_token(self, token: str) -> Optional[dict]:
        """Decode a token; None when the signature or expiry check fails"""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info(f"Rejected session token: {e}")
            return None

auth_handler = AuthHandler()

def _identity_from_credentials(credentials: HTTPAuthorizationCredentials) -> dict:
    payload = auth_handler.verify_token(credentials.credentials)
    if payload is None or not payload.get("phone"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token"
        )
    return {
        "phone": payload["phone"],
        "role": payload.get("role", Role.ENUMERATOR.value),
        "name": payload.get("name"),
    }

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> dict:
    """Dependency to get current authenticated user"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _identity_from_credentials(credentials)

def get_optional_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[dict]:
    """Like get_current_user, but anonymous callers get None instead of a 401"""
    if credentials is None:
        return None
    return _identity_from_credentials(credentials)

# Role-based access control
class RoleChecker:
    """Check user roles for authorization"""

    def __init__(self, allowed_roles: list):
        self.allowed_roles = allowed_roles

    def __call__(self, user: dict = Depends(get_current_user)):
        if user.get("role") not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted"
            )
        return user

class PermissionChecker:
    """Check a named permission; anonymous callers act as PUBLIC"""

    def __init__(self, permission: str):
        self.permission = permission

    def __call__(self, user: Optional[dict] = Depends(get_optional_user)) -> Optional[dict]:
        role = user["role"] if user else Role.PUBLIC.value
        if has_permission(role, self.permission):
            return user
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted"
        )

# Common role checkers
admin_required = RoleChecker([Role.ADMIN.value])
