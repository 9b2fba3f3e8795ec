from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field


class OrderCreate(BaseModel):
    # the storefront UI historically posted template_id
    item_id: str = Field(min_length=1, validation_alias=AliasChoices("item_id", "template_id"))


class OrderCreated(BaseModel):
    order_id: str
    memo: str
    payment_url: str


class OrderStatusResponse(BaseModel):
    payment_status: str
    template_name: str | None = None


class PurchaseResponse(BaseModel):
    order_id: str
    template_id: str
    template_name: str
    template_slug: str
    amount: Decimal
    currency: str
    transaction_id: str | None = None
    purchased_at: datetime | None = None
    download_url: str
