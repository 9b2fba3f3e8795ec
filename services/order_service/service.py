"""
Order creation: one purchase attempt per (user, template).

A completed order blocks repurchase. A pending order keeps its memo, so a
buyer who clicks "Buy" twice lands on the same HOT Pay checkout. A failed
order is retried on the same row under a new memo.
"""
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import AuthError, ConflictError, NotFoundError, PersistenceError
from shared.observability import storefront_orders_total
from services.catalog_service.models import Template
from services.catalog_service.repository import TemplateRepository
from services.payment_service.gateway import HotPayClient
from .models import Order, PaymentStatus, new_memo
from .repository import OrderRepository
from .schemas import OrderCreated, PurchaseResponse

logger = structlog.get_logger(__name__)


class OrderService:

    @staticmethod
    async def create_or_get_order(
        db: AsyncSession, gateway: HotPayClient, user_id: str | None, item_id: str
    ) -> OrderCreated:
        if not user_id:
            raise AuthError(detail="Sign in to purchase templates")

        template = await TemplateRepository.get_active(db, item_id)
        if not template:
            storefront_orders_total.labels(outcome="template_not_found").inc()
            raise NotFoundError("template_not_found", f"Template {item_id} is not available")

        template_id = template.id
        existing = await OrderRepository.get_for_user_and_template(db, user_id, template_id)
        if existing:
            return await OrderService._resume(db, gateway, existing, template)

        order = Order(
            user_id=user_id,
            template_id=template.id,
            amount=template.price,
            currency=template.currency,
            payment_status=PaymentStatus.PENDING.value,
            memo=new_memo(),
        )
        try:
            order = await OrderRepository.create_order(db, order)
        except IntegrityError:
            # A concurrent request inserted the row for this pair first
            await db.rollback()
            template = await TemplateRepository.get_active(db, template_id)
            existing = await OrderRepository.get_for_user_and_template(db, user_id, template_id)
            if not (template and existing):
                storefront_orders_total.labels(outcome="error").inc()
                raise PersistenceError("failed_to_create_order", "Could not create the order")
            return await OrderService._resume(db, gateway, existing, template)
        except SQLAlchemyError as e:
            await db.rollback()
            storefront_orders_total.labels(outcome="error").inc()
            logger.error("order_insert_failed", user_id=user_id, template_id=template_id, error=str(e))
            raise PersistenceError("failed_to_create_order", "Could not create the order") from e

        storefront_orders_total.labels(outcome="created").inc()
        logger.info("order_created", order_id=order.id, user_id=user_id, template_id=template.id, memo=order.memo)
        return OrderService._created(gateway, order, template)

    @staticmethod
    async def _resume(
        db: AsyncSession, gateway: HotPayClient, order: Order, template: Template
    ) -> OrderCreated:
        if order.payment_status == PaymentStatus.COMPLETED.value:
            storefront_orders_total.labels(outcome="already_purchased").inc()
            raise ConflictError("already_purchased", "You already own this template")

        if order.payment_status == PaymentStatus.PENDING.value and order.memo:
            storefront_orders_total.labels(outcome="reused").inc()
            logger.info("order_reused", order_id=order.id, memo=order.memo)
            return OrderService._created(gateway, order, template)

        order_id, previous_memo = order.id, order.memo
        try:
            order = await OrderRepository.reissue(db, order, new_memo(), template.price, template.currency)
        except SQLAlchemyError as e:
            await db.rollback()
            storefront_orders_total.labels(outcome="error").inc()
            logger.error("order_reissue_failed", order_id=order_id, error=str(e))
            raise PersistenceError("failed_to_create_order", "Could not restart the order") from e

        storefront_orders_total.labels(outcome="reissued").inc()
        logger.info("order_reissued", order_id=order.id, previous_memo=previous_memo, memo=order.memo)
        return OrderService._created(gateway, order, template)

    @staticmethod
    def _created(gateway: HotPayClient, order: Order, template: Template) -> OrderCreated:
        return OrderCreated(
            order_id=order.id,
            memo=order.memo,
            payment_url=gateway.build_payment_url(template.hotpay_item_id, order.amount, order.memo),
        )

    @staticmethod
    async def list_purchases(db: AsyncSession, user_id: str) -> list[PurchaseResponse]:
        orders = await OrderRepository.list_completed_for_user(db, user_id)
        return [
            PurchaseResponse(
                order_id=o.id,
                template_id=o.template_id,
                template_name=o.template.name,
                template_slug=o.template.slug,
                amount=o.amount,
                currency=o.currency,
                transaction_id=o.transaction_id,
                purchased_at=o.purchased_at,
                download_url=o.template.download_url,
            )
            for o in orders
        ]
