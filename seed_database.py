"""
Seed the database with enumerator accounts, an administrator and the default
synonym list. Existing rows with the same phone or synonym are left alone.

    python seed_database.py
    ADMIN_PHONE=9000000001 ADMIN_NAME="Field Admin" python seed_database.py
"""

from dotenv import load_dotenv
load_dotenv()

import logging
import os

from nco_search.database import SessionLocal, engine, Base
from nco_search.models import user, otp, audit_log, synonym  # noqa: F401 - register tables
from nco_search.models.synonym import Synonym
from nco_search.models.user import User
from nco_search.services.synonym_service import DEFAULT_SYNONYMS

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("seed_database")

SEED_USERS = [
    {"phone": "8925341040", "name": "8925341040 - Enumerator", "role": "ENUMERATOR"},
    {"phone": "8248805628", "name": "8248805628 - Enumerator", "role": "ENUMERATOR"},
    {"phone": "8610873826", "name": "8610873826 - Enumerator", "role": "ENUMERATOR"},
]

def seed_users(db, users) -> int:
    created = 0
    for data in users:
        if db.query(User).filter(User.phone == data["phone"]).first():
            logger.info(f"User {data['phone']} already exists, skipping")
            continue
        db.add(User(is_active=True, **data))
        created += 1
        logger.info(f"Seeded {data['name']} ({data['phone']}) - {data['role']}")
    return created

def seed_synonyms(db) -> int:
    created = 0
    for data in DEFAULT_SYNONYMS:
        if db.query(Synonym).filter(Synonym.synonym == data["synonym"]).first():
            continue
        db.add(Synonym(**data))
        created += 1
    return created

def seed_database():
    """Create tables and insert the seed rows"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    users = list(SEED_USERS)
    admin_phone = os.getenv("ADMIN_PHONE")
    if admin_phone:
        users.append({
            "phone": admin_phone,
            "name": os.getenv("ADMIN_NAME", "System Admin"),
            "role": "ADMIN",
        })

    db = SessionLocal()
    try:
        user_count = seed_users(db, users)
        synonym_count = seed_synonyms(db)
        db.commit()
        logger.info(f"Seeding complete: {user_count} user(s), {synonym_count} synonym(s) added")
    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding database: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    seed_database()
