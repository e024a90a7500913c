"""Theme service — the shared theme catalog."""

import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pathix.db.models import Theme
from pathix.errors import NotFound


class ThemeService:
    """Business logic for themes. Themes have no owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_theme(
        self,
        name: str,
        assets: list[dict[str, Any]],
        background_image: Optional[str] = None,
        fonts: Optional[list[str]] = None,
        road_style: Optional[dict[str, Any]] = None,
        animations: Optional[dict[str, Any]] = None,
    ) -> Theme:
        theme = Theme(
            name=name,
            assets=assets,
            background_image=background_image,
            fonts=fonts or [],
            road_style=road_style or {},
            animations=animations or {},
        )
        self.db.add(theme)
        await self.db.commit()
        return theme

    async def list_themes(self) -> list[Theme]:
        result = await self.db.execute(
            select(Theme).order_by(Theme.created_at, Theme.id)
        )
        return list(result.scalars().all())

    async def get_theme(self, theme_id: str | uuid.UUID) -> Theme:
        try:
            tid = theme_id if isinstance(theme_id, uuid.UUID) else uuid.UUID(str(theme_id))
        except ValueError:
            raise NotFound("Theme not found")
        theme = await self.db.get(Theme, tid)
        if not theme:
            raise NotFound("Theme not found")
        return theme
