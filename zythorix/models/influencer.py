# zythorix/models/influencer.py
"""
Influencer referral models: influencer accounts and the sales tracked
against their coupon codes.
"""

import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, BaseModel


class Influencer(Base, BaseModel):
    """
    Influencer account, identified publicly by its coupon code
    """
    __tablename__ = "influencers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    coupon_code = Column(String(10), unique=True, nullable=False, index=True)
    password_hash = Column(String(100), nullable=False)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=10.00)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    orders = relationship(
        "InfluencerOrder",
        back_populates="influencer",
        cascade="all, delete-orphan",
    )

    def to_public_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "couponCode": self.coupon_code,
            "commissionRate": float(self.commission_rate),
        }

    def __repr__(self):
        return f"<Influencer {self.coupon_code} ({self.email})>"


class InfluencerOrder(Base, BaseModel):
    """
    A completed sale attributed to an influencer's coupon. Never mutated.
    """
    __tablename__ = "influencer_orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    influencer_id = Column(
        UUID(as_uuid=True), ForeignKey("influencers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    order_amount = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    # scale 6 holds amount * rate / 100 exactly for 2-decimal amount and rate
    commission_amount = Column(Numeric(16, 6), nullable=False)

    coupon_used = Column(String(10), nullable=False)
    customer_email = Column(String(255), nullable=True)
    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="SET NULL"), nullable=True)
    payment_id = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="completed")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    influencer = relationship("Influencer", back_populates="orders")

    def __repr__(self):
        return f"<InfluencerOrder {self.order_amount}₹ via {self.coupon_used}>"
