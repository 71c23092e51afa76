# zythorix/api/influencer_admin.py
"""
Admin endpoints for managing influencers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from zythorix.core.dependencies import require_admin
from zythorix.core.logging import get_logger
from zythorix.core.security import AuthenticatedUser
from zythorix.db.session import get_db
from zythorix.schemas.influencer import InfluencerCreateRequest, InfluencerStatusUpdate
from zythorix.services.influencer_service import InfluencerService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/create")
async def create_influencer(
    data: InfluencerCreateRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create an influencer; the temporary password is only returned here
    """
    logger.info(f"Admin {admin.email} creating influencer {data.email}")
    return await InfluencerService.create_influencer(db, data)


@router.get("")
async def list_influencers(
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return await InfluencerService.list_influencers(db)


@router.get("/export")
async def export_influencers(
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    CSV report of influencers and their sales
    """
    content = await InfluencerService.export_csv(db)
    filename = InfluencerService.export_filename()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.patch("/{influencer_id}")
async def update_influencer_status(
    influencer_id: str,
    data: InfluencerStatusUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return await InfluencerService.set_active(db, influencer_id, data.is_active)


@router.delete("")
async def delete_influencer(
    id: Optional[str] = Query(None),
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    logger.info(f"Admin {admin.email} deleting influencer {id}")
    return await InfluencerService.delete_influencer(db, id)
