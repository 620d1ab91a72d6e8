"""
Synonym management for admin users
"""

from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from nco_search.models.synonym import Synonym
from nco_search.schemas.occupation import SynonymCreate
from nco_search.services.audit_logger import AuditLogger, SYNONYM_ADD, SYNONYM_REMOVE
from nco_search.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

DEFAULT_SYNONYMS = [
    {"synonym": "seamstress", "nco_code": "75320101", "occupation": "Sewing Machine Operator (Garment)"},
    {"synonym": "stitcher", "nco_code": "75320101", "occupation": "Sewing Machine Operator (Garment)"},
    {"synonym": "programmer", "nco_code": "25120101", "occupation": "Software Developer"},
    {"synonym": "coder", "nco_code": "25120101", "occupation": "Software Developer"},
]

class SynonymService:
    """List, add and remove synonym mappings, auditing every change"""

    def __init__(self, db: Session):
        self.db = db
        self.audit = AuditLogger(db)

    def list_synonyms(self) -> list[Synonym]:
        return self.db.query(Synonym).order_by(Synonym.id).all()

    def count(self) -> int:
        return self.db.query(Synonym).count()

    async def add_synonym(self, data: SynonymCreate, actor: str) -> Synonym:
        try:
            synonym = Synonym(
                synonym=data.synonym,
                nco_code=data.nco_code,
                occupation=data.occupation
            )
            self.db.add(synonym)
            self.db.commit()
            self.db.refresh(synonym)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to add synonym: {e}")
            raise DatabaseError(f"Failed to add synonym: {str(e)}", e)

        await self.audit.log(
            SYNONYM_ADD,
            actor,
            f'Added synonym: "{synonym.synonym}" → {synonym.nco_code} ({synonym.occupation})'
        )
        logger.info(f"Synonym added: {synonym.synonym} -> {synonym.nco_code}")
        return synonym

    async def remove_synonym(self, synonym_id: int, actor: str) -> None:
        synonym = self.db.query(Synonym).filter(Synonym.id == synonym_id).first()
        if not synonym:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Synonym not found"
            )

        term = synonym.synonym
        try:
            self.db.delete(synonym)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to remove synonym {synonym_id}: {e}")
            raise DatabaseError(f"Failed to remove synonym: {str(e)}", e)

        await self.audit.log(SYNONYM_REMOVE, actor, f'Removed synonym: "{term}"')
        logger.info(f"Synonym removed: {term}")
