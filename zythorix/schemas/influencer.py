"""
Influencer program schemas.
Presence of required fields is checked by the services so that a missing
value yields the same 400 body as an empty one.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InfluencerCreateRequest(BaseModel):
    """Admin request to open an influencer account"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    commission_rate: Optional[float] = Field(None, alias="commissionRate", ge=0, le=100, allow_inf_nan=False)


class InfluencerStatusUpdate(BaseModel):
    """Activate or deactivate an influencer"""
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(..., alias="isActive")


class InfluencerLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coupon_code: Optional[str] = Field(None, alias="couponCode")
    password: Optional[str] = None


class CouponVerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coupon_code: Optional[str] = Field(None, alias="couponCode")


class TrackOrderRequest(BaseModel):
    """Sale completed with an influencer coupon"""
    model_config = ConfigDict(populate_by_name=True)

    coupon_code: Optional[str] = Field(None, alias="couponCode")
    order_amount: Optional[float] = Field(None, alias="orderAmount", allow_inf_nan=False)
    discount_amount: Optional[float] = Field(0, alias="discountAmount", allow_inf_nan=False)
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    material_id: Optional[str] = Field(None, alias="materialId")
    payment_id: Optional[str] = Field(None, alias="paymentId")
