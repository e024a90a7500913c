"""Map API routes.

Learn: Viewing a map is public — anyone holding the link (usually via a
QR code) can open it, and each view counts against the owner's scans.
Everything else needs a session token, except /maps/export, which takes
a token if one is sent and otherwise saves an anonymous map.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from pathix.auth.dependencies import (
    CurrentIdentity,
    get_current_identity,
    get_optional_identity,
)
from pathix.config import Settings, get_settings
from pathix.db.engine import get_db
from pathix.schemas.map import MapCreate, MapCreated, MapDeleted, MapList, MapRead
from pathix.services.map_service import MapService
from pathix.services.quota import QuotaEnforcer

router = APIRouter(prefix="/maps")


def get_quota(conn: HTTPConnection) -> QuotaEnforcer:
    return conn.app.state.quota


def _svc(
    db: AsyncSession = Depends(get_db),
    quota: QuotaEnforcer = Depends(get_quota),
    settings: Settings = Depends(get_settings),
) -> MapService:
    return MapService(db, quota, settings.frontend_url)


async def _create(svc: MapService, owner_id: Optional[str], body: MapCreate) -> MapCreated:
    map_, link = await svc.create_map(
        owner_id,
        name=body.name,
        data=body.data,
        gps_path=body.gps_path,
        landmarks=body.landmarks,
        theme=body.theme,
    )
    return MapCreated(map=MapRead.model_validate(map_), link=link)


@router.post("", response_model=MapCreated, status_code=201)
async def create_map(
    body: MapCreate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: MapService = Depends(_svc),
):
    """Save a map for the signed-in user (plan quota applies)."""
    return await _create(svc, identity.user_id, body)


@router.post("/export", response_model=MapCreated, status_code=201)
async def export_map(
    body: MapCreate,
    identity: Optional[CurrentIdentity] = Depends(get_optional_identity),
    svc: MapService = Depends(_svc),
):
    """Save a map for sharing; anonymous when no token is sent."""
    return await _create(svc, identity.user_id if identity else None, body)


@router.get("", response_model=MapList)
async def list_maps(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: MapService = Depends(_svc),
):
    """The signed-in user's maps, newest first."""
    maps = await svc.list_maps(identity.user_id)
    return MapList(maps=[MapRead.model_validate(m) for m in maps])


@router.get("/{map_id}", response_model=MapRead)
async def get_map(map_id: str, svc: MapService = Depends(_svc)):
    """Public view by id."""
    return await svc.get_map(map_id)


@router.delete("/{map_id}", response_model=MapDeleted)
async def delete_map(
    map_id: str,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: MapService = Depends(_svc),
):
    deleted_id = await svc.delete_map(identity.user_id, map_id)
    return MapDeleted(id=deleted_id)
