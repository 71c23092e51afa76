"""
Download tracking service for the Zythorix360 API.
"""

from typing import Dict, Any, List

from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from zythorix.core.logging import get_logger
from zythorix.core.security import AuthenticatedUser
from zythorix.models.material import Material, MaterialDownload
from zythorix.models.payment import Purchase, PURCHASE_COMPLETED
from zythorix.utils.error_handling import handle_exception
from zythorix.utils.validators import parse_uuid

logger = get_logger(__name__)


class DownloadService:
    """Service for material downloads and download history"""

    @staticmethod
    async def track_download(db: Session, user: AuthenticatedUser, material_id: str) -> Dict[str, Any]:
        """
        Authorize a download and count it once per user

        Returns:
            Whether this was the user's first download and the material's counter
        """
        parsed = parse_uuid(material_id)
        material = db.query(Material).filter(Material.id == parsed).first() if parsed else None
        if not material:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Material not found")

        if not material.is_free:
            purchase = db.query(Purchase.id).filter(
                Purchase.user_id == user.id,
                Purchase.material_id == material.id,
                Purchase.status == PURCHASE_COMPLETED
            ).first()
            if not purchase:
                logger.warning(f"Download of paid material {material.id} refused for user {user.id}")
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Purchase required to download")

        already_downloaded = db.query(MaterialDownload.id).filter(
            MaterialDownload.user_id == user.id,
            MaterialDownload.material_id == material.id
        ).first() is not None

        is_new_download = False
        if not already_downloaded:
            try:
                db.add(MaterialDownload(
                    user_id=user.id,
                    user_email=user.email,
                    material_id=material.id,
                    material_title=material.title,
                    material_type=material.material_type,
                ))
                # Counter is incremented in SQL, not from the loaded value
                db.execute(
                    update(Material)
                    .where(Material.id == material.id)
                    .values(downloads=Material.downloads + 1)
                )
                db.commit()
                is_new_download = True
            except IntegrityError:
                # A concurrent first download was recorded; count as repeat
                db.rollback()
                logger.info(f"Download of {material.id} by {user.id} already recorded concurrently")
            except SQLAlchemyError as e:
                db.rollback()
                raise handle_exception(e, "Error recording download", detail="Failed to record download")

        db.refresh(material)

        if is_new_download:
            logger.info(f"📥 New download of '{material.title}' by {user.id} (total {material.downloads})")

        return {
            "success": True,
            "isNewDownload": is_new_download,
            "downloadCount": material.downloads,
            "downloadUrl": material.pdf_url,
        }

    @staticmethod
    async def get_history(db: Session, user: AuthenticatedUser) -> List[Dict[str, Any]]:
        """The user's downloads, newest first"""
        try:
            downloads = (
                db.query(MaterialDownload)
                .options(joinedload(MaterialDownload.material))
                .filter(MaterialDownload.user_id == user.id)
                .order_by(MaterialDownload.downloaded_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching download history", detail="Failed to fetch download history")

        return [
            {
                "id": str(d.id),
                "material_id": str(d.material_id),
                "material_title": d.material_title,
                "material_type": d.material_type,
                "downloaded_at": d.downloaded_at,
                "materials": d.material.to_summary() if d.material else None,
            }
            for d in downloads
        ]
