"""
Services module for the Zythorix360 API.
This module contains business logic services used by the API endpoints.
"""

from .razorpay_service import RazorpayService, RazorpayError
from .influencer_service import InfluencerService
from .payment_service import PaymentService
from .download_service import DownloadService
from .material_service import MaterialService
from .mock_test_service import MockTestService

__all__ = [
    "RazorpayService",
    "RazorpayError",
    "InfluencerService",
    "PaymentService",
    "DownloadService",
    "MaterialService",
    "MockTestService",
]
