"""Theme API routes.

Learn: Themes are a shared catalog. Reading is public. Creating is also
open right now (it was meant for admin use); there is no admin role to
check against yet, so POST /themes is unauthenticated.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pathix.db.engine import get_db
from pathix.schemas.theme import ThemeCreate, ThemeRead
from pathix.services.theme_service import ThemeService

router = APIRouter(prefix="/themes")


def _svc(db: AsyncSession = Depends(get_db)) -> ThemeService:
    return ThemeService(db)


@router.get("", response_model=list[ThemeRead])
async def list_themes(svc: ThemeService = Depends(_svc)):
    return await svc.list_themes()


@router.get("/{theme_id}", response_model=ThemeRead)
async def get_theme(theme_id: str, svc: ThemeService = Depends(_svc)):
    return await svc.get_theme(theme_id)


@router.post("", response_model=ThemeRead, status_code=201)
async def create_theme(body: ThemeCreate, svc: ThemeService = Depends(_svc)):
    return await svc.create_theme(
        name=body.name,
        assets=[a.model_dump() for a in body.assets],
        background_image=body.background_image,
        fonts=body.fonts,
        road_style=body.road_style.model_dump(by_alias=True, exclude_none=True),
        animations=body.animations.model_dump(by_alias=True),
    )
