import json

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import AuthError, ValidationError
from shared.security import WEBHOOK_SECRET_HEADER, verify_webhook_secret
from .schemas import WebhookPayload, WebhookResponse
from .service import ReconciliationService

# Called by HOT Pay, not by buyers: no bearer token
router = APIRouter(prefix="/api/hotpay", tags=["Payments"])


def parse_webhook_payload(raw: bytes) -> WebhookPayload:
    try:
        body = json.loads(raw or b"{}")
    except json.JSONDecodeError:
        raise ValidationError("missing_fields", "Webhook body is not valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("missing_fields", "Webhook body must be a JSON object")
    try:
        return WebhookPayload.model_validate(body)
    except PydanticValidationError:
        raise ValidationError("missing_fields", "memo and status are required")


@router.post("/webhook", response_model=WebhookResponse)
async def hotpay_webhook(
    request: Request,
    secret: str | None = Header(default=None, alias=WEBHOOK_SECRET_HEADER),
    db: AsyncSession = Depends(get_db),
):
    # Missing fields (400) take precedence over a secret mismatch (401)
    payload = parse_webhook_payload(await request.body())
    if not verify_webhook_secret(secret):
        raise AuthError(detail="Invalid webhook secret")

    payment_status = await ReconciliationService.handle_webhook(db, payload)
    return WebhookResponse(payment_status=payment_status, memo=payload.memo)
