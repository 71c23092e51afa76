# zythorix/models/material.py
"""
Study material catalogue and per-user download records.
"""

import uuid
from sqlalchemy import Column, String, Boolean, Numeric, Integer, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, BaseModel


class Material(Base, BaseModel):
    """
    Model representing a downloadable study material (free or paid)
    """
    __tablename__ = "materials"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(100), nullable=True, index=True)
    class_name = Column("class", String(50), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_free = Column(Boolean, nullable=False, default=True)
    downloads = Column(Integer, nullable=False, default=0)
    pdf_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def material_type(self) -> str:
        return "free" if self.is_free else "paid"

    def to_summary(self):
        """Projection embedded in purchase and download history rows"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "subject": self.subject,
            "class": self.class_name,
            "thumbnail_url": self.thumbnail_url,
            "is_free": self.is_free,
            "price": float(self.price) if self.price is not None else None,
            "pdf_url": self.pdf_url,
        }

    def __repr__(self):
        return f"<Material {self.title} ({self.material_type})>"


class MaterialDownload(Base, BaseModel):
    """
    First download of a material by a user; at most one row per pair
    """
    __tablename__ = "material_downloads"
    __table_args__ = (
        UniqueConstraint("user_id", "material_id", name="uq_material_downloads_user_material"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    user_email = Column(String(255), nullable=True)
    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="CASCADE"), nullable=False)

    # Snapshots taken at download time
    material_title = Column(String(255), nullable=True)
    material_type = Column(String(10), nullable=True)

    downloaded_at = Column(DateTime(timezone=True), server_default=func.now())

    material = relationship("Material")
