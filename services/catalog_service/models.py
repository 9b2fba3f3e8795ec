import uuid

from sqlalchemy import Boolean, Column, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(8), nullable=False, default="USD")
    hotpay_item_id = Column(String(255), nullable=True) # falls back to HOTPAY_ITEM_ID
    download_url = Column(String(1024), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
