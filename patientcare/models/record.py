"""Record document model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from patientcare.database import Base


class RecordDocument(Base):
    """A serialized record list stored under a fixed key."""
    __tablename__ = "record_documents"

    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False, default="[]")
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime)
