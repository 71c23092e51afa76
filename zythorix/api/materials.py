# zythorix/api/materials.py
"""
Material endpoints: public catalogue, download tracking and admin CRUD.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from zythorix.core.dependencies import ensure_same_user, require_admin
from zythorix.core.logging import get_logger
from zythorix.core.security import AuthenticatedUser, get_current_user
from zythorix.db.session import get_db
from zythorix.schemas.material import DownloadRequest, MaterialCreate, MaterialUpdate
from zythorix.services.download_service import DownloadService
from zythorix.services.material_service import MaterialService

logger = get_logger(__name__)

router = APIRouter()
admin_router = APIRouter()


@router.get("")
async def list_materials(
    subject: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    return await MaterialService.list_materials(db, subject)


@router.post("/download")
async def download_material(
    data: DownloadRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Authorize a download and count the user's first one
    """
    if not data.material_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Material ID required")
    ensure_same_user(current_user, data.user_id)
    return await DownloadService.track_download(db, current_user, data.material_id)


@admin_router.post("")
async def create_material(
    data: MaterialCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return await MaterialService.create_material(db, data)


@admin_router.put("")
async def update_material(
    data: MaterialUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return await MaterialService.update_material(db, data)


@admin_router.delete("")
async def delete_material(
    id: Optional[str] = Query(None),
    admin: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return await MaterialService.delete_material(db, id)
