# zythorix/api/influencers.py
"""
Influencer endpoints: login, dashboard stats, coupon verification and
order tracking.
"""

from typing import Dict, Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from zythorix.core.logging import get_logger
from zythorix.core.security import get_current_influencer_claims
from zythorix.db.session import get_db
from zythorix.schemas.influencer import InfluencerLoginRequest, CouponVerifyRequest, TrackOrderRequest
from zythorix.services.influencer_service import InfluencerService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/login")
async def login(data: InfluencerLoginRequest, db: Session = Depends(get_db)):
    """
    Log in with coupon code and password
    """
    return await InfluencerService.login(db, data)


@router.get("/stats")
async def get_stats(
    claims: Dict[str, Any] = Depends(get_current_influencer_claims),
    db: Session = Depends(get_db)
):
    """
    Sales, commission and orders of the logged-in influencer
    """
    return await InfluencerService.get_stats(db, claims)


@router.post("/verify-coupon")
async def verify_coupon(data: CouponVerifyRequest, db: Session = Depends(get_db)):
    return await InfluencerService.verify_coupon(db, data.coupon_code)


@router.post("/track-order")
async def track_order(data: TrackOrderRequest, db: Session = Depends(get_db)):
    """
    Record a sale made with an influencer coupon
    """
    return await InfluencerService.track_order(db, data)
