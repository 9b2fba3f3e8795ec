from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from .models import Order, PaymentStatus


class OrderRepository:
    @staticmethod
    async def create_order(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def get_for_user_and_template(db: AsyncSession, user_id: str, template_id: str) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .where(Order.template_id == template_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_by_memo(db: AsyncSession, memo: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.memo == memo))
        return result.scalars().first()

    @staticmethod
    async def get_by_memo_for_user(db: AsyncSession, memo: str, user_id: str) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.memo == memo)
            .where(Order.user_id == user_id)
        )
        return result.scalars().first()

    @staticmethod
    async def list_completed_for_user(db: AsyncSession, user_id: str):
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .where(Order.payment_status == PaymentStatus.COMPLETED.value)
            .order_by(Order.purchased_at.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def reissue(db: AsyncSession, order: Order, memo: str, amount, currency: str) -> Order:
        """Puts a failed (or memo-less) order back to pending under a fresh memo."""
        order.memo = memo
        order.payment_status = PaymentStatus.PENDING.value
        order.transaction_id = None
        order.amount = amount
        order.currency = currency
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def apply_terminal_status(
        db: AsyncSession, order_id: str, status: PaymentStatus, transaction_id: str | None
    ) -> bool:
        """
        Moves an order to a terminal status unless it is already completed.

        Returns False when nothing was updated, i.e. another reconciliation
        completed the order first.
        """
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id)
            .where(Order.payment_status != PaymentStatus.COMPLETED.value)
            .values(payment_status=status.value, transaction_id=transaction_id, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount > 0
