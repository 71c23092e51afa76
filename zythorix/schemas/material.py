"""
Material schemas: admin catalogue management and download tracking.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MaterialCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    subject: Optional[str] = Field(None, max_length=100)
    class_name: Optional[str] = Field(None, alias="class", max_length=50)
    price: float = Field(0, ge=0)
    is_free: bool = True
    pdf_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class MaterialUpdate(BaseModel):
    """Partial update; only fields present in the body are written"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    subject: Optional[str] = Field(None, max_length=100)
    class_name: Optional[str] = Field(None, alias="class", max_length=50)
    price: Optional[float] = Field(None, ge=0)
    is_free: Optional[bool] = None
    pdf_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    material_id: Optional[str] = Field(None, alias="materialId")
    user_id: Optional[str] = Field(None, alias="userId")
