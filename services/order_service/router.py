from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.config.database import get_db
from shared.errors import AuthError, ValidationError
from shared.security import get_current_user, get_optional_user, limiter
from services.payment_service.gateway import HotPayClient, get_gateway_client
from services.payment_service.service import ReconciliationService
from .schemas import OrderCreate, OrderCreated, OrderStatusResponse, PurchaseResponse
from .service import OrderService

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post("/orders", response_model=OrderCreated)
@limiter.limit(settings.ORDER_RATE_LIMIT)
async def create_order(
    request: Request,                          # slowapi reads the caller key from this
    payload: OrderCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: HotPayClient = Depends(get_gateway_client),
):
    return await OrderService.create_or_get_order(db, gateway, user_id, payload.item_id)


@router.get("/orders/verify", response_model=OrderStatusResponse)
async def verify_order(
    memo: str | None = Query(default=None),
    user_id: str | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    gateway: HotPayClient = Depends(get_gateway_client),
):
    if not memo:
        raise ValidationError("memo_required", "memo is required")
    if not user_id:
        raise AuthError(detail="Could not validate credentials")
    result = await ReconciliationService.verify_order(db, gateway, user_id, memo)
    return OrderStatusResponse(payment_status=result.payment_status, template_name=result.template_name)


@router.get("/purchases", response_model=list[PurchaseResponse])
async def list_purchases(
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_purchases(db, user_id)
