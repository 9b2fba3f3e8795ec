import enum
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shared.config.database import Base
from services.catalog_service.models import Template


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


def new_memo() -> str:
    return str(uuid.uuid4())


class Order(Base):
    __tablename__ = "purchases"
    # One row per (user, template): failed attempts are retried on the same row
    __table_args__ = (UniqueConstraint("user_id", "template_id", name="uq_purchases_user_template"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    template_id = Column(String(36), ForeignKey("templates.id"), nullable=False)
    memo = Column(String(64), unique=True, nullable=True, index=True) # join key HOT Pay reports back with
    payment_status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value)
    amount = Column(Numeric(10, 2), nullable=False) # price snapshot at order time
    currency = Column(String(8), nullable=False, default="USD")
    transaction_id = Column(String(255), nullable=True)
    purchased_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    template = relationship(Template, lazy="joined")

    @property
    def is_completed(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED.value
