"""
Application settings for the NCO Search API
Values come from the environment or a local .env file
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "NCO Search API"
    APP_ENV: str = "development"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./nco_search.db"
    DATABASE_CONNECT_TIMEOUT: int = 5

    # Session tokens
    SECRET_KEY: str = "default-secret-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # OTP
    OTP_EXPIRY_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 3
    OTP_SWEEP_INTERVAL_SECONDS: int = 60
    OTP_ROLLBACK_ON_DELIVERY_FAILURE: bool = False

    # SMS delivery
    SMS_BACKEND: str = "twilio"  # twilio, console
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    TWILIO_API_BASE_URL: str = "https://api.twilio.com/2010-04-01"
    SMS_COUNTRY_CODE: str = "+91"
    SMS_TIMEOUT_SECONDS: float = 5.0

    # CORS
    FRONTEND_URL: str = "http://localhost:5173"
    CORS_EXTRA_ORIGINS: str = "http://localhost:5174"
    CORS_PREVIEW_ORIGIN_REGEX: str = r"https://[a-zA-Z0-9-]+\.vercel\.app"

    @property
    def origins_list(self) -> List[str]:
        extra = [origin.strip() for origin in self.CORS_EXTRA_ORIGINS.split(",") if origin.strip()]
        return [self.FRONTEND_URL] + extra

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    API_RATE_LIMIT: str = "100/15 minutes"
    OTP_RATE_LIMIT: str = "3/15 minutes"

    # Offline demo: lets these numbers log in as enumerators when the
    # database is unreachable. Never enable in production.
    DEMO_BYPASS_ENABLED: bool = False
    DEMO_PHONES: str = "9876543210,8248805628"

    @property
    def demo_phones_list(self) -> List[str]:
        return [phone.strip() for phone in self.DEMO_PHONES.split(",") if phone.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


settings = Settings()
