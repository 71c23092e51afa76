"""
Database models module for the Zythorix360 API.
This module contains SQLAlchemy ORM models that represent database tables.
"""

from .base import Base, create_tables
from .influencer import Influencer, InfluencerOrder
from .material import Material, MaterialDownload
from .payment import Payment, Purchase
from .mock_test import MockTest

__all__ = [
    "Base",
    "create_tables",
    "Influencer",
    "InfluencerOrder",
    "Material",
    "MaterialDownload",
    "Payment",
    "Purchase",
    "MockTest",
]
