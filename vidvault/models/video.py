"""
Video Model
"""
from sqlalchemy import Column, String, Float, DateTime, Text
from datetime import datetime
import uuid

from vidvault.database import Base
from vidvault.models.types import GUID


class Video(Base):
    """
    Video metadata table

    One row per asset stored on the hosted media service. Rows are created
    once by the metadata endpoint and never updated.
    """
    __tablename__ = "videos"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    public_id = Column(String(255), nullable=False, unique=True, index=True)

    # Byte counts as reported by the client and the media host
    original_size = Column(String(32), nullable=False, default="0")
    compressed_size = Column(String(32), nullable=False, default="0")
    duration = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Video(id={self.id}, title={self.title}, public_id={self.public_id})>"
