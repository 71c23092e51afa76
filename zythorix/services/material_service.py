"""
Material catalogue service for the Zythorix360 API.
"""

from decimal import Decimal
from typing import Dict, Any, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zythorix.core.logging import get_logger
from zythorix.models.material import Material
from zythorix.schemas.material import MaterialCreate, MaterialUpdate
from zythorix.utils.error_handling import handle_exception
from zythorix.utils.validators import parse_uuid

logger = get_logger(__name__)


class MaterialService:
    """Service for browsing and managing study materials"""

    @staticmethod
    async def list_materials(db: Session, subject: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            query = db.query(Material)
            if subject:
                query = query.filter(Material.subject == subject)
            materials = query.order_by(Material.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching materials", detail="Failed to fetch materials")

        return [m.to_dict() for m in materials]

    @staticmethod
    def _get_or_404(db: Session, material_id: Optional[str]) -> Material:
        parsed = parse_uuid(material_id)
        material = db.query(Material).filter(Material.id == parsed).first() if parsed else None
        if not material:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Material not found")
        return material

    @staticmethod
    async def create_material(db: Session, data: MaterialCreate) -> Dict[str, Any]:
        fields = data.model_dump()
        fields["price"] = Decimal(str(fields["price"]))

        try:
            material = Material(**fields)
            db.add(material)
            db.commit()
            db.refresh(material)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error creating material", detail="Failed to create material")

        logger.info(f"Material created: {material.title} ({material.material_type})")
        return {"success": True, "material": material.to_dict()}

    @staticmethod
    async def update_material(db: Session, data: MaterialUpdate) -> Dict[str, Any]:
        """Write only the fields present in the request"""
        material = MaterialService._get_or_404(db, data.id)
        updates = data.model_dump(exclude_unset=True, exclude={"id"})
        if "price" in updates and updates["price"] is not None:
            updates["price"] = Decimal(str(updates["price"]))

        try:
            for key, value in updates.items():
                setattr(material, key, value)
            db.commit()
            db.refresh(material)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error updating material", detail="Failed to update material")

        logger.info(f"Material updated: {material.id} ({', '.join(updates) or 'no changes'})")
        return {"success": True, "material": material.to_dict()}

    @staticmethod
    async def delete_material(db: Session, material_id: Optional[str]) -> Dict[str, Any]:
        if not material_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Material ID required")

        material = MaterialService._get_or_404(db, material_id)
        try:
            db.delete(material)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error deleting material", detail="Failed to delete material")

        logger.info(f"Material deleted: {material_id}")
        return {"success": True}
