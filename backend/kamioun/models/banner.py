"""
Home screen banners
"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class Banner(SerializerMixin, Base):
    __tablename__ = "banners"

    id = Column(String(36), primary_key=True, default=new_id)
    url = Column(Text, nullable=False)
    alt_text = Column(String(255))
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
