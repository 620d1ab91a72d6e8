"""
Synonym model mapping alternative job terms to NCO occupations
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from nco_search.database import Base

class Synonym(Base):
    """Synonym term pointing at a target occupation"""
    __tablename__ = "synonyms"
    
    id = Column(Integer, primary_key=True, index=True)
    synonym = Column(String(100), nullable=False, index=True)
    nco_code = Column(String(8), nullable=False)
    occupation = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    def __repr__(self):
        return f"<Synonym(id={self.id}, synonym='{self.synonym}', nco_code='{self.nco_code}')>"
