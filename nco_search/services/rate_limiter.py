"""
Shared rate limiters

The slowapi limiter guards every /api route with one shared per-IP budget.
OTP requests get a second, much tighter budget keyed by phone number; it is
checked inside the handler because the key lives in the request body.
"""

from typing import Optional
from fastapi import HTTPException, Request, status
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from nco_search.config import settings

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# One counter shared by all API routes
api_limit = limiter.shared_limit(
    settings.API_RATE_LIMIT,
    scope="api",
    error_message="Too many requests from this IP. Please try again later."
)

class OTPRateLimiter:
    """Per-phone (falling back to per-IP) ceiling on OTP requests"""

    def __init__(self, limit: str = None, enabled: bool = None):
        self.limit = parse(limit or settings.OTP_RATE_LIMIT)
        self.enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled
        self.storage = MemoryStorage()
        self.strategy = MovingWindowRateLimiter(self.storage)

    def check(self, request: Request, phone: Optional[str] = None) -> None:
        """Count one OTP request, raising 429 once the budget is spent"""
        if not self.enabled:
            return
        key = phone or get_remote_address(request)
        if not self.strategy.hit(self.limit, "otp", key):
            logger.warning(f"OTP rate limit exceeded for {key}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many OTP requests. Please try again after 15 minutes."
            )

    def reset(self) -> None:
        self.storage.reset()

otp_rate_limiter = OTPRateLimiter()
