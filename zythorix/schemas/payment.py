"""
Payment schemas for the Razorpay checkout flow.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    """
    Request to open a gateway order.
    Either amount or materialId must be given; a material supplies its price.
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    material_id: Optional[str] = Field(None, alias="materialId")
    subscription_plan: Optional[str] = Field(None, alias="subscriptionPlan", max_length=50)
    coupon_code: Optional[str] = Field(None, alias="couponCode", max_length=10)
    discount_amount: Optional[float] = Field(0, alias="discountAmount", ge=0, allow_inf_nan=False)


class VerifyPaymentRequest(BaseModel):
    """Checkout callback forwarded by the client after payment"""
    model_config = ConfigDict(populate_by_name=True)

    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    material_id: Optional[str] = Field(None, alias="materialId")
    user_id: Optional[str] = Field(None, alias="userId")
