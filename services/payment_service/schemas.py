from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WebhookPayload(BaseModel):
    """Body HOT Pay posts to /api/hotpay/webhook. Unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore")

    memo: str = Field(min_length=1)
    status: str
    near_trx: str | None = Field(default=None, validation_alias=AliasChoices("near_trx", "transaction_id"))


class WebhookResponse(BaseModel):
    success: bool = True
    payment_status: str
    memo: str


class GatewayPayment(BaseModel):
    """One record from HOT Pay's processed_payments lookup."""
    model_config = ConfigDict(extra="ignore")

    status: str | None = None
    memo: str | None = None
    near_trx: str | None = None
