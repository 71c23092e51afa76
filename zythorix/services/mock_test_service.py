"""
Mock test catalogue service for the Zythorix360 API.
"""

from decimal import Decimal
from typing import Dict, Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zythorix.core.logging import get_logger
from zythorix.models.mock_test import MockTest
from zythorix.schemas.mock_test import MockTestCreate, MockTestUpdate
from zythorix.utils.error_handling import handle_exception
from zythorix.utils.validators import parse_uuid

logger = get_logger(__name__)


class MockTestService:
    """Service for listing and managing mock tests"""

    @staticmethod
    async def list_tests(db: Session) -> Dict[str, Any]:
        """All mock tests, newest first"""
        try:
            tests = db.query(MockTest).order_by(MockTest.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching tests", detail="Failed to fetch tests")

        return {"tests": [t.to_dict() for t in tests]}

    @staticmethod
    def _get_or_404(db: Session, test_id: Optional[str]) -> MockTest:
        parsed = parse_uuid(test_id)
        test = db.query(MockTest).filter(MockTest.id == parsed).first() if parsed else None
        if not test:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Test not found")
        return test

    @staticmethod
    async def create_test(db: Session, data: MockTestCreate) -> Dict[str, Any]:
        fields = data.model_dump()
        # A free test never carries a price
        fields["price"] = Decimal("0") if fields["is_free"] else Decimal(str(fields["price"]))

        try:
            test = MockTest(**fields)
            db.add(test)
            db.commit()
            db.refresh(test)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error creating test", detail="Failed to create test")

        logger.info(f"Mock test created: {test.title} ({test.category}, {test.difficulty})")
        return {"test": test.to_dict()}

    @staticmethod
    async def update_test(db: Session, data: MockTestUpdate) -> Dict[str, Any]:
        test = MockTestService._get_or_404(db, data.id)
        updates = data.model_dump(exclude_unset=True, exclude={"id"})
        if updates.get("price") is not None:
            updates["price"] = Decimal(str(updates["price"]))
        if updates.get("is_free"):
            updates["price"] = Decimal("0")

        try:
            for key, value in updates.items():
                setattr(test, key, value)
            db.commit()
            db.refresh(test)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error updating test", detail="Failed to update test")

        logger.info(f"Mock test updated: {test.id} ({', '.join(updates) or 'no changes'})")
        return {"test": test.to_dict()}

    @staticmethod
    async def delete_test(db: Session, test_id: Optional[str]) -> Dict[str, Any]:
        if not test_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Test ID required")

        test = MockTestService._get_or_404(db, test_id)
        try:
            db.delete(test)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error deleting test", detail="Failed to delete test")

        logger.info(f"Mock test deleted: {test_id}")
        return {"message": "Test deleted successfully"}
