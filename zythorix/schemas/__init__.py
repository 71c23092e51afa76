"""
Pydantic schemas for request validation.
"""

from .influencer import (
    InfluencerCreateRequest,
    InfluencerStatusUpdate,
    InfluencerLoginRequest,
    CouponVerifyRequest,
    TrackOrderRequest,
)
from .payment import CreateOrderRequest, VerifyPaymentRequest
from .material import MaterialCreate, MaterialUpdate, DownloadRequest
from .mock_test import MockTestCreate, MockTestUpdate

__all__ = [
    "InfluencerCreateRequest",
    "InfluencerStatusUpdate",
    "InfluencerLoginRequest",
    "CouponVerifyRequest",
    "TrackOrderRequest",
    "CreateOrderRequest",
    "VerifyPaymentRequest",
    "MaterialCreate",
    "MaterialUpdate",
    "DownloadRequest",
    "MockTestCreate",
    "MockTestUpdate",
]
