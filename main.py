"""
NCO Search - Occupation Classification REST API
OTP-authenticated search service mapping job descriptions to NCO codes
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import uvicorn
from contextlib import asynccontextmanager
import asyncio
import logging

# Import our modules
from nco_search.config import settings
from nco_search.database import engine, Base, SessionLocal, check_database_connection, get_db
from nco_search.models import user, otp, audit_log, synonym  # noqa: F401 - register tables
from nco_search.routers import auth, users, search, admin
from nco_search.services.otp_service import build_otp_store
from nco_search.services.rate_limiter import limiter
from nco_search.services.sms_service import build_sms_client
from nco_search.utils.clock import utcnow
from nco_search.utils.error_handler import register_exception_handlers

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

async def sweep_expired_otps(store, interval_seconds: int):
    """Periodically drop expired OTP records"""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            store.sweep_expired()
        except Exception as e:
            logger.error(f"OTP sweep failed: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    database_available = True
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")
    except SQLAlchemyError as e:
        database_available = False
        logger.error(f"Database connection error: {e}")
        logger.warning("Server will continue running with an in-memory OTP ledger")

    app.state.otp_store = build_otp_store(database_available, SessionLocal)
    app.state.sms_client = build_sms_client()
    if not app.state.sms_client.is_configured:
        logger.warning("SMS provider is NOT configured (check your .env file)")

    sweeper = asyncio.create_task(
        sweep_expired_otps(app.state.otp_store, settings.OTP_SWEEP_INTERVAL_SECONDS)
    )

    yield

    # Shutdown
    sweeper.cancel()
    logger.info(f"Shutting down {settings.APP_NAME}...")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Maps free-text job descriptions to National Classification of Occupations codes",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

# Configured frontend plus preview deployments
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_origin_regex=settings.CORS_PREVIEW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(admin.router, prefix="/api", tags=["admin"])

@app.get("/")
async def root():
    """Root endpoint with API information - publicly accessible"""
    return {
        "message": "NCO Search Backend API",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }

@app.get("/health")
async def health_check(request: Request, db: Session = Depends(get_db)):
    """Health check endpoint"""
    sms_client = getattr(request.app.state, "sms_client", None)
    otp_store = getattr(request.app.state, "otp_store", None)
    return {
        "status": "OK",
        "message": "NCO Search Backend Server is running",
        "sms_configured": bool(sms_client and sms_client.is_configured),
        "database_connected": check_database_connection(db),
        "otp_store": getattr(otp_store, "backend", None),
        "timestamp": utcnow().isoformat()
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
