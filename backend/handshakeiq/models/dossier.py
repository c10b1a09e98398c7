from sqlalchemy import Column, String, Text, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from ..core.db import Base

class Dossier(Base):
    __tablename__ = "dossiers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    person_name = Column(String, nullable=False)
    person_title = Column(String, nullable=True)
    person_company = Column(String, nullable=True)
    person_email = Column(String, nullable=True)
    person_photo_url = Column(String, nullable=True)
    intelligence_report = Column(JSON, nullable=True)  # IntelligenceReport payload
    sources = Column(JSON, nullable=True)              # List[GroundingSource]
    social_media_links = Column(JSON, nullable=True)   # List[SocialLink]
    search_query = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    notes = relationship(
        "Note",
        back_populates="dossier",
        cascade="all, delete-orphan",
    )
