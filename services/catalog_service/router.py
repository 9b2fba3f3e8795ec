from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from .schemas import TemplateResponse
from .service import CatalogService

router = APIRouter(prefix="/api/templates", tags=["Catalog"])


@router.get("", response_model=list[TemplateResponse])
async def list_templates(db: AsyncSession = Depends(get_db)):
    return await CatalogService.list_templates(db)


@router.get("/{slug}", response_model=TemplateResponse)
async def get_template(slug: str, db: AsyncSession = Depends(get_db)):
    return await CatalogService.get_template(db, slug)
