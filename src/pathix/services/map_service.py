"""Map service — create, list, view and delete saved maps.

Learn: There is exactly one create operation. The owner is optional:
with an owner the create runs inside the quota guard; without one it is
an anonymous export (no quota, no owner, reachable by link only). The
only other branch is payload shape — a pre-built `data` document, or
raw gpsPath/landmarks/theme components assembled here. Either way the
theme must exist at creation time.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pathix.db.models import Map, Theme
from pathix.errors import NotFound, ValidationError
from pathix.services.quota import QuotaEnforcer

logger = structlog.get_logger()


def _parse_id(value: str | uuid.UUID | None) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class MapService:
    """Business logic for maps."""

    def __init__(self, db: AsyncSession, quota: QuotaEnforcer, frontend_url: str):
        self.db = db
        self.quota = quota
        self.frontend_url = frontend_url.rstrip("/")

    def share_link(self, map_id: uuid.UUID) -> str:
        """Public link the frontend renders (and encodes into QR codes)."""
        return f"{self.frontend_url}/maps/{map_id}"

    async def _resolve_theme(self, theme_ref: Any) -> Theme:
        theme_id = _parse_id(theme_ref)
        theme = await self.db.get(Theme, theme_id) if theme_id else None
        if not theme:
            raise NotFound("Theme not found")
        return theme

    async def _build_payload(
        self,
        data: Optional[dict[str, Any]],
        gps_path: Optional[list[Any]],
        landmarks: Optional[list[Any]],
        theme: Optional[str],
    ) -> dict[str, Any]:
        if data:
            if not data.get("theme"):
                raise ValidationError("Map data must reference a theme")
            resolved = await self._resolve_theme(data["theme"])
            return {**data, "theme": str(resolved.id)}
        if not gps_path or not theme:
            raise ValidationError("Name and data required")
        resolved = await self._resolve_theme(theme)
        return {
            "gpsPath": gps_path,
            "landmarks": landmarks or [],
            "theme": str(resolved.id),
        }

    async def create_map(
        self,
        owner_id: Optional[str | uuid.UUID],
        name: str,
        data: Optional[dict[str, Any]] = None,
        gps_path: Optional[list[Any]] = None,
        landmarks: Optional[list[Any]] = None,
        theme: Optional[str] = None,
    ) -> tuple[Map, str]:
        """Save a map and return it with its public share link.

        owner_id=None is an anonymous export: no owner, no quota check.
        """
        if not name:
            raise ValidationError("Name and data required")

        if owner_id is None:
            payload = await self._build_payload(data, gps_path, landmarks, theme)
            map_ = Map(user_id=None, name=name, data=payload)
            self.db.add(map_)
            await self.db.commit()
            logger.info("maps.exported", map_id=str(map_.id))
            return map_, self.share_link(map_.id)

        uid = _parse_id(owner_id)
        if uid is None:
            raise NotFound("User not found")

        async with self.quota.guard(self.db, uid) as owner:
            await self.quota.check_map_quota(self.db, owner)
            payload = await self._build_payload(data, gps_path, landmarks, theme)
            map_ = Map(user_id=owner.id, name=name, data=payload)
            self.db.add(map_)
            await self.db.commit()

        logger.info("maps.created", map_id=str(map_.id), user_id=str(uid))
        return map_, self.share_link(map_.id)

    async def list_maps(self, owner_id: str | uuid.UUID) -> list[Map]:
        """The owner's maps, newest first."""
        uid = _parse_id(owner_id)
        if uid is None:
            return []
        result = await self.db.execute(
            select(Map)
            .where(Map.user_id == uid)
            .order_by(Map.created_at.desc(), Map.id.desc())
        )
        return list(result.scalars().all())

    async def get_map(self, map_id: str | uuid.UUID) -> Map:
        """Public view by id. Counts a scan against the owner, if any."""
        mid = _parse_id(map_id)
        map_ = await self.db.get(Map, mid) if mid else None
        if not map_:
            raise NotFound("Map not found")
        if map_.user_id is not None:
            await self.quota.record_scan(self.db, map_.user_id)
        return map_

    async def delete_map(self, owner_id: str | uuid.UUID, map_id: str | uuid.UUID) -> uuid.UUID:
        """Delete one of the owner's maps. NotFound if missing or not theirs."""
        uid = _parse_id(owner_id)
        mid = _parse_id(map_id)
        if uid is None or mid is None:
            raise NotFound("Map not found")
        result = await self.db.execute(
            select(Map).where(Map.id == mid, Map.user_id == uid)
        )
        map_ = result.scalars().first()
        if not map_:
            raise NotFound("Map not found")
        await self.db.delete(map_)
        await self.db.commit()
        logger.info("maps.deleted", map_id=str(mid), user_id=str(uid))
        return mid
