# zythorix/models/payment.py
"""
Payment and purchase models.
A Payment follows the gateway order from creation (pending) to signature
verification (completed); a Purchase is the entitlement granted by it.
"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, BaseModel

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PURCHASE_COMPLETED = "completed"


class Payment(Base, BaseModel):
    """
    Model for tracking gateway payments
    """
    __tablename__ = "payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="SET NULL"), nullable=True)
    subscription_plan = Column(String(50), nullable=True)

    # Amounts in rupees; amount is what the gateway charged
    amount = Column(Numeric(10, 2), nullable=False)
    original_amount = Column(Numeric(10, 2), nullable=True)
    discount_amount = Column(Numeric(10, 2), nullable=True, default=0)
    coupon_code = Column(String(10), nullable=True)
    currency = Column(String(3), nullable=False, default="INR")

    # Gateway data
    payment_method = Column(String(20), nullable=False, default="razorpay")
    gateway_order_id = Column(String(100), nullable=True, index=True)
    gateway_payment_id = Column(String(100), nullable=True, unique=True)

    status = Column(String(20), nullable=False, default=PAYMENT_PENDING)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Payment {self.gateway_order_id} {self.status}>"


class Purchase(Base, BaseModel):
    """
    Proof that a user paid for a material; gates paid downloads
    """
    __tablename__ = "purchases"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="CASCADE"), nullable=False)
    payment_id = Column(UUID(as_uuid=True), ForeignKey("payments.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PURCHASE_COMPLETED)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    material = relationship("Material")
    payment = relationship("Payment")

    def __repr__(self):
        return f"<Purchase {self.material_id} by {self.user_id}>"
