"""Database models."""
from datetime import datetime

from sqlalchemy import Column, DateTime, JSON, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Document(Base):
    """A single JSON document addressed by (collection, id)."""

    __tablename__ = "documents"

    collection = Column(String, primary_key=True, index=True)
    id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
