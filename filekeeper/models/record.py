"""Record model: an uploaded document plus its descriptive metadata."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, Date, DateTime, Float, ForeignKey,
                        String, Uuid)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from filekeeper.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(Base):
    __tablename__ = "records"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Always a physical folder, never Starred/Recent/Expiring
    folder_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("folders.id"),
        nullable=False,
        index=True,
    )
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=True)
    amount = Column(Float, nullable=True)
    company_name = Column(String(64), nullable=True)
    coupon_code = Column(String(32), nullable=True)
    description = Column(String(512), nullable=True)
    doc_type = Column(String(32), nullable=True)
    name = Column(String(32), nullable=True)
    product_id = Column(String(32), nullable=True)
    purchase_date = Column(Date, nullable=True)
    exp_date = Column(Date, nullable=True, index=True)
    last_accessed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    is_starred = Column(Boolean, nullable=False, default=False)
    notify_on = Column(Boolean, nullable=False, default=False)
    # Trash bookkeeping: where the record lived before it was trashed
    origin_folder_id = Column(Uuid(as_uuid=True), nullable=True)
    trashed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    files = relationship(
        "RecordFile", back_populates="record", cascade="all, delete-orphan"
    )
