"""Category taxonomy, seeded externally and read-only for the application."""

import uuid

from sqlalchemy import Column, String, Uuid

from filekeeper.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(32), nullable=False)
    color = Column(String(32), nullable=False)
    icon = Column(String(128), nullable=False)
