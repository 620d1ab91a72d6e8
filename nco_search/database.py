"""
Database engine and session management
"""

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from nco_search.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Connection options with a bounded connect timeout"""
    if url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DATABASE_CONNECT_TIMEOUT,
            }
        }
    return {
        "pool_pre_ping": True,
        "pool_timeout": settings.DATABASE_CONNECT_TIMEOUT,
        "connect_args": {"connect_timeout": settings.DATABASE_CONNECT_TIMEOUT},
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database_connection(db=None) -> bool:
    """Return True when the database answers a trivial query"""
    try:
        if db is not None:
            db.execute(text("SELECT 1"))
        else:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Database connectivity check failed: {e}")
        return False
