"""
Error handling utilities: every failure leaves the API as a JSON body with a
stable "error" field
"""

import uuid
import traceback
import logging
from typing import Optional, Dict, Any, List
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from nco_search.config import settings
from nco_search.utils.clock import utcnow

logger = logging.getLogger(__name__)

# Labels used when turning schema errors into sentences
FIELD_LABELS = {
    "phone": "Phone number",
    "otp": "OTP",
    "name": "Name",
    "role": "Role",
    "query": "Search query",
    "synonym": "Synonym",
    "nco_code": "NCO code",
    "occupation": "Occupation",
}

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.error_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class DatabaseError(Exception):
    """Custom exception for database-related errors"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class ErrorHandler:
    """Centralized error response construction"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        status_code: int = 500,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized 5xx response for an unexpected failure"""

        content: Dict[str, Any] = {
            "error": ErrorHandler._get_user_friendly_message(error),
            "error_id": error_context.error_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        # Stack traces only leave the process in debug mode
        if include_details:
            content["details"] = {
                "original_error": str(error),
                "error_type": type(error).__name__,
                "stack_trace": traceback.format_exc()
            }

        ErrorHandler._log_error(error_context, error, status_code)

        return JSONResponse(status_code=status_code, content=content)

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        """Generate user-friendly error messages"""
        if isinstance(error, DatabaseError):
            return "A database error occurred. Please try again later."
        return "Internal server error"

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        logger.error(
            f"Error {error_context.error_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "error_id": error_context.error_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
            exc_info=error
        )

    @staticmethod
    def describe_validation_errors(errors: List[dict]) -> List[str]:
        """Turn pydantic error dicts into readable sentences"""
        messages = []
        for err in errors:
            field = str(err.get("loc", ["body"])[-1])
            label = FIELD_LABELS.get(field, field)
            if err.get("type") == "missing":
                messages.append(f"{label} is required")
            elif err.get("ctx", {}).get("error") is not None:
                messages.append(str(err["ctx"]["error"]))
            else:
                messages.append(f"{label}: {err.get('msg', 'invalid value')}")
        return messages

class DatabaseManager:
    """Context manager for safe database operations"""

    def __init__(self, db_session_factory):
        self.db_session_factory = db_session_factory
        self.db = None

    def __enter__(self) -> Session:
        try:
            self.db = self.db_session_factory()
            return self.db
        except Exception as e:
            raise DatabaseError(f"Failed to create database session: {str(e)}", e)

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.db:
            try:
                if exc_type is None:
                    self.db.commit()
                else:
                    self.db.rollback()
            except SQLAlchemyError as e:
                logger.error(f"Database transaction error: {e}")
                self.db.rollback()
                raise DatabaseError(f"Database transaction failed: {str(e)}", e)
            finally:
                self.db.close()
        if exc_type is not None and issubclass(exc_type, SQLAlchemyError):
            raise DatabaseError(f"Database operation failed: {exc_val}", exc_val) from exc_val
        return False

def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that shape every error body"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = ErrorHandler.describe_validation_errors(exc.errors())
        logger.info(f"Rejected {request.method} {request.url.path}: {messages}")
        return JSONResponse(
            status_code=400,
            content={
                "error": messages[0] if messages else "Invalid request",
                "details": messages
            }
        )

    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request: Request, exc: DatabaseError):
        return ErrorHandler.create_error_response(
            ErrorContext(request), exc, 500, include_details=settings.DEBUG
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        return ErrorHandler.create_error_response(
            ErrorContext(request), exc, 500, include_details=settings.DEBUG
        )
