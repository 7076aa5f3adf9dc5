"""Schemas for records and their file metadata."""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RecordFileOut(BaseModel):
    id: UUID
    file_url: str
    file_key: Optional[str] = None
    file_date: Optional[date] = None

    class Config:
        from_attributes = True


class RecordFields(BaseModel):
    """Editable record metadata shared by create and update."""
    category_id: Optional[UUID] = None
    amount: Optional[float] = None
    company_name: Optional[str] = Field(None, max_length=64)
    coupon_code: Optional[str] = Field(None, max_length=32)
    description: Optional[str] = Field(None, max_length=512)
    doc_type: Optional[str] = Field(None, max_length=32)
    name: Optional[str] = Field(None, max_length=32)
    product_id: Optional[str] = Field(None, max_length=32)
    purchase_date: Optional[date] = None
    exp_date: Optional[date] = None
    is_starred: Optional[bool] = None
    notify_on: Optional[bool] = None


class RecordCreate(RecordFields):
    """Record creation request, optionally carrying an uploaded file descriptor."""
    folder_id: UUID
    file_url: Optional[str] = Field(None, max_length=256)
    file_key: Optional[str] = Field(None, max_length=128)


class RecordUpdate(RecordFields):
    """Partial update; only fields present in the body are changed."""
    folder_id: Optional[UUID] = None


class RecordRestore(BaseModel):
    destination_folder_id: Optional[UUID] = Field(
        None, description="Target folder (null to return to the original folder)"
    )


class RecordOut(BaseModel):
    """Record response."""
    id: UUID
    folder_id: UUID
    category_id: Optional[UUID] = None
    amount: Optional[float] = None
    company_name: Optional[str] = None
    coupon_code: Optional[str] = None
    description: Optional[str] = None
    doc_type: Optional[str] = None
    name: Optional[str] = None
    product_id: Optional[str] = None
    purchase_date: Optional[date] = None
    exp_date: Optional[date] = None
    last_accessed_at: Optional[datetime] = None
    is_starred: bool = False
    notify_on: bool = False
    origin_folder_id: Optional[UUID] = None
    trashed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    files: List[RecordFileOut] = []

    class Config:
        from_attributes = True
