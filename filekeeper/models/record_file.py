import uuid
from sqlalchemy import Column, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from filekeeper.db.base import Base


class RecordFile(Base):
    """Object-storage metadata for a file attached to a record."""

    __tablename__ = "record_files"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    record_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_url = Column(String(256), nullable=False)
    file_key = Column(String(128), nullable=True)
    file_date = Column(Date, nullable=True)
    ocr_data = Column(Text, nullable=True)

    record = relationship("Record", back_populates="files")
