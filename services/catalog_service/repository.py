from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Template


class TemplateRepository:

    @staticmethod
    async def get_active(db: AsyncSession, template_id: str) -> Optional[Template]:
        result = await db.execute(
            select(Template)
            .where(Template.id == template_id)
            .where(Template.is_active.is_(True))
        )
        return result.scalars().first()

    @staticmethod
    async def get_active_by_slug(db: AsyncSession, slug: str) -> Optional[Template]:
        result = await db.execute(
            select(Template)
            .where(Template.slug == slug)
            .where(Template.is_active.is_(True))
        )
        return result.scalars().first()

    @staticmethod
    async def list_active(db: AsyncSession):
        result = await db.execute(
            select(Template)
            .where(Template.is_active.is_(True))
            .order_by(Template.created_at.desc())
        )
        return result.scalars().all()
