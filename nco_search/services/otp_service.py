"""
OTP service - generation, ledger storage and verification of one-time passcodes
Two ledgers are available: the database table, and an in-process fallback
used when the database cannot be reached
"""

import hmac
import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
from fastapi import Depends, Request
from sqlalchemy import delete
import logging

from nco_search.config import settings
from nco_search.models.otp import OTPRecord
from nco_search.utils.clock import utcnow, as_naive_utc
from nco_search.utils.error_handler import DatabaseManager

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No OTP found. Please request a new one."
EXPIRED_MESSAGE = "OTP has expired. Please request a new one."
TOO_MANY_ATTEMPTS_MESSAGE = "Too many failed attempts. Please request a new OTP."

def generate_otp() -> str:
    """Uniformly random 6-digit code in 100000-999999"""
    return str(100000 + secrets.randbelow(900000))

@dataclass
class OTPEntry:
    """Ledger entry, detached from any storage backend"""
    phone: str
    code: str
    expires_at: datetime
    attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

class InMemoryOTPStore:
    """Process-local OTP ledger with lazy expiry on read"""

    backend = "memory"

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._entries: Dict[str, OTPEntry] = {}
        self._clock = clock

    def save(self, entry: OTPEntry) -> None:
        self._entries[entry.phone] = replace(entry)

    def get(self, phone: str) -> Optional[OTPEntry]:
        entry = self._entries.get(phone)
        return replace(entry) if entry else None

    def increment_attempts(self, phone: str) -> int:
        entry = self._entries.get(phone)
        if entry is None:
            return 0
        entry.attempts += 1
        return entry.attempts

    def delete(self, phone: str) -> bool:
        return self._entries.pop(phone, None) is not None

    def sweep_expired(self) -> int:
        """Remove expired entries"""
        now = self._clock()
        expired_keys = [
            phone for phone, entry in self._entries.items()
            if entry.is_expired(now)
        ]
        for phone in expired_keys:
            del self._entries[phone]

        if expired_keys:
            logger.info(f"Cleaned up {len(expired_keys)} expired OTP entries")
        return len(expired_keys)

    def clear(self) -> None:
        self._entries.clear()

class DatabaseOTPStore:
    """OTP ledger backed by the otp_records table"""

    backend = "database"

    def __init__(self, session_factory, clock: Callable[[], datetime] = utcnow):
        self.session_factory = session_factory
        self._clock = clock

    def save(self, entry: OTPEntry) -> None:
        with DatabaseManager(self.session_factory) as db:
            record = db.query(OTPRecord).filter(OTPRecord.phone == entry.phone).first()
            if record is None:
                record = OTPRecord(phone=entry.phone)
                db.add(record)
            record.code = entry.code
            record.expires_at = entry.expires_at
            record.attempts = entry.attempts

    def get(self, phone: str) -> Optional[OTPEntry]:
        with DatabaseManager(self.session_factory) as db:
            record = db.query(OTPRecord).filter(OTPRecord.phone == phone).first()
            if record is None:
                return None
            return OTPEntry(
                phone=record.phone,
                code=record.code,
                expires_at=as_naive_utc(record.expires_at),
                attempts=record.attempts
            )

    def increment_attempts(self, phone: str) -> int:
        with DatabaseManager(self.session_factory) as db:
            record = db.query(OTPRecord).filter(OTPRecord.phone == phone).with_for_update().first()
            if record is None:
                return 0
            record.attempts = record.attempts + 1
            return record.attempts

    def delete(self, phone: str) -> bool:
        with DatabaseManager(self.session_factory) as db:
            result = db.execute(delete(OTPRecord).where(OTPRecord.phone == phone))
            return result.rowcount > 0

    def sweep_expired(self) -> int:
        with DatabaseManager(self.session_factory) as db:
            result = db.execute(delete(OTPRecord).where(OTPRecord.expires_at < self._clock()))
            if result.rowcount:
                logger.info(f"Cleaned up {result.rowcount} expired OTP records")
            return result.rowcount

@dataclass
class VerificationResult:
    valid: bool
    message: str
    attempts: int = 0

class OTPService:
    """Issues codes into a ledger and checks submitted codes against it"""

    def __init__(
        self,
        store,
        expiry_minutes: int = None,
        max_attempts: int = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.store = store
        self.expiry = timedelta(minutes=expiry_minutes or settings.OTP_EXPIRY_MINUTES)
        self.max_attempts = max_attempts or settings.OTP_MAX_ATTEMPTS
        self._clock = clock

    def issue(self, phone: str) -> str:
        """Generate and store a fresh code, replacing any unconsumed one"""
        code = generate_otp()
        expires_at = self._clock() + self.expiry
        self.store.save(OTPEntry(phone=phone, code=code, expires_at=expires_at, attempts=0))
        logger.info(f"OTP stored for {phone}, expires at {expires_at.isoformat()}")
        return code

    def revoke(self, phone: str) -> None:
        self.store.delete(phone)

    def verify(self, phone: str, code: str) -> VerificationResult:
        """Check a submitted code; terminal outcomes remove the ledger entry"""
        entry = self.store.get(phone)

        if entry is None:
            return VerificationResult(False, NOT_FOUND_MESSAGE)

        if entry.is_expired(self._clock()):
            self.store.delete(phone)
            return VerificationResult(False, EXPIRED_MESSAGE, entry.attempts)

        if entry.attempts >= self.max_attempts:
            self.store.delete(phone)
            return VerificationResult(False, TOO_MANY_ATTEMPTS_MESSAGE, entry.attempts)

        if hmac.compare_digest(entry.code.encode(), str(code).encode()):
            # Only the verifier that removes the entry may consume it
            if not self.store.delete(phone):
                logger.warning(f"OTP for {phone} was consumed by a concurrent verification")
                return VerificationResult(False, NOT_FOUND_MESSAGE, entry.attempts)
            logger.info(f"OTP verified successfully for {phone}")
            return VerificationResult(True, "OTP verified successfully", entry.attempts)

        attempts = self.store.increment_attempts(phone)
        logger.warning(f"Invalid OTP for {phone}. Attempt {attempts}/{self.max_attempts}")
        if attempts >= self.max_attempts:
            self.store.delete(phone)
            return VerificationResult(False, TOO_MANY_ATTEMPTS_MESSAGE, attempts)
        return VerificationResult(
            False,
            f"Invalid OTP. Attempt {attempts}/{self.max_attempts}.",
            attempts
        )

def build_otp_store(database_available: bool, session_factory):
    """Pick the ledger for this process"""
    if database_available:
        return DatabaseOTPStore(session_factory)
    logger.warning("Database unavailable, OTP ledger falling back to process memory")
    return InMemoryOTPStore()

def get_otp_store(request: Request):
    """Dependency returning the ledger built at startup"""
    return request.app.state.otp_store

def get_otp_service(store=Depends(get_otp_store)) -> OTPService:
    return OTPService(store)
