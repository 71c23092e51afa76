# zythorix/api/users.py
"""
User endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from zythorix.core.security import AuthenticatedUser, get_current_user
from zythorix.db.session import get_db
from zythorix.services.download_service import DownloadService

router = APIRouter()


@router.get("/download-history")
async def get_download_history(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Materials downloaded by the current user, newest first
    """
    return await DownloadService.get_history(db, current_user)
