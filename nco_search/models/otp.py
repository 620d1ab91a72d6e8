"""
OTP ledger model, one live record per phone
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from nco_search.database import Base

class OTPRecord(Base):
    """Pending one-time passcode for a phone number"""
    __tablename__ = "otp_records"
    
    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(10), unique=True, index=True, nullable=False)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    def __repr__(self):
        return f"<OTPRecord(phone='{self.phone}', expires_at='{self.expires_at}', attempts={self.attempts})>"
