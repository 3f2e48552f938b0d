"""SQLAlchemy models."""
from sqlalchemy import Column, DateTime, Integer, String, JSON
from sqlalchemy.sql import func

from .database import Base


class StateDocument(Base):
    """Whole application state serialized as one JSON document per key."""
    __tablename__ = "state_documents"

    key = Column(String(100), primary_key=True)
    payload = Column(JSON, nullable=False)
    # Bumped on every save; a writer must hold the version it loaded.
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
