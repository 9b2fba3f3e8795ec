"""
Reconciliation of HOT Pay results into order state.

Two independent paths move a pending order to a terminal status:

* push: HOT Pay calls the webhook with {memo, status, near_trx}
* pull: the buyer's status page polls the verify endpoint, which asks
  HOT Pay's processed_payments API when the webhook has not landed yet

Both may run for the same order at the same time. Each checks for an
already-completed order before doing anything, and the write itself is a
conditional update keyed by order id, so whichever path commits second
leaves a completed order (and its transaction_id) untouched.
"""
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError, PersistenceError, UpstreamUnavailable
from shared.observability import storefront_reconciliation_total
from services.order_service.models import Order, PaymentStatus
from services.order_service.repository import OrderRepository
from .gateway import HotPayClient
from .schemas import WebhookPayload
from .status import map_lookup_status, map_webhook_status

logger = structlog.get_logger(__name__)


@dataclass
class VerifyResult:
    payment_status: str
    template_name: str | None


class ReconciliationService:

    @staticmethod
    async def handle_webhook(db: AsyncSession, payload: WebhookPayload) -> str:
        """Applies a HOT Pay callback; returns the order's resulting payment status."""
        order = await OrderRepository.get_by_memo(db, payload.memo)
        if not order:
            logger.warning("webhook_unknown_memo", memo=payload.memo)
            raise NotFoundError("order_not_found", "No order matches this memo")

        if order.is_completed:
            # Replayed or duplicate notification
            storefront_reconciliation_total.labels(path="webhook", status="duplicate").inc()
            logger.info("webhook_duplicate", order_id=order.id, memo=payload.memo, status=payload.status)
            return PaymentStatus.COMPLETED.value

        new_status = map_webhook_status(payload.status)
        order_id = order.id
        try:
            applied = await OrderRepository.apply_terminal_status(db, order_id, new_status, payload.near_trx)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("webhook_persist_failed", order_id=order_id, memo=payload.memo, error=str(e))
            raise PersistenceError("internal_server_error", "Could not record the payment result") from e

        final_status = new_status.value if applied else PaymentStatus.COMPLETED.value
        storefront_reconciliation_total.labels(path="webhook", status=final_status).inc()
        logger.info(
            "webhook_applied",
            order_id=order_id,
            memo=payload.memo,
            gateway_status=payload.status,
            payment_status=final_status,
            transaction_id=payload.near_trx,
        )
        return final_status

    @staticmethod
    async def verify_order(db: AsyncSession, gateway: HotPayClient, user_id: str, memo: str) -> VerifyResult:
        """
        Current status of the caller's order, reconciled against HOT Pay when still open.

        Gateway failures and failed writes are never surfaced here: the poller gets
        the last known status and simply asks again on its next tick.
        """
        order = await OrderRepository.get_by_memo_for_user(db, memo, user_id)
        if not order:
            raise NotFoundError("order_not_found", "No order matches this memo for the current user")

        template_name = order.template.name if order.template else None
        current = VerifyResult(order.payment_status, template_name)

        if order.is_completed:
            return current

        if not gateway.is_configured:
            return current

        try:
            payment = await gateway.lookup_payment(memo)
        except UpstreamUnavailable:
            storefront_reconciliation_total.labels(path="poll", status=order.payment_status).inc()
            return current

        if payment is None:
            return current

        new_status = map_lookup_status(payment.status)
        if new_status is None:
            storefront_reconciliation_total.labels(path="poll", status=order.payment_status).inc()
            return current

        return await ReconciliationService._apply_poll_result(db, order, new_status, payment.near_trx, current)

    @staticmethod
    async def _apply_poll_result(
        db: AsyncSession, order: Order, new_status: PaymentStatus, transaction_id: str | None, current: VerifyResult
    ) -> VerifyResult:
        order_id, memo = order.id, order.memo
        try:
            applied = await OrderRepository.apply_terminal_status(db, order_id, new_status, transaction_id)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("poll_persist_failed", order_id=order_id, memo=memo, error=str(e))
            return current

        final_status = new_status.value if applied else PaymentStatus.COMPLETED.value
        storefront_reconciliation_total.labels(path="poll", status=final_status).inc()
        logger.info("poll_applied", order_id=order_id, memo=memo, payment_status=final_status, transaction_id=transaction_id)
        return VerifyResult(final_status, current.template_name)
