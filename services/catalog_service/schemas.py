from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class TemplateResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str
    price: Decimal
    currency: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True
