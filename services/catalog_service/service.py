from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError
from .models import Template
from .repository import TemplateRepository


class CatalogService:

    @staticmethod
    async def list_templates(db: AsyncSession):
        return await TemplateRepository.list_active(db)

    @staticmethod
    async def get_template(db: AsyncSession, slug: str) -> Template:
        template = await TemplateRepository.get_active_by_slug(db, slug)
        if not template:
            raise NotFoundError("template_not_found", f"No active template with slug '{slug}'")
        return template
