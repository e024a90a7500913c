"""Pydantic schemas for maps."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from pathix.schemas.common import CamelModel

MAP_NAME_MAX = 200


class MapCreate(CamelModel):
    """Either a pre-built `data` document or gpsPath + landmarks + theme."""

    name: Optional[str] = Field(None, max_length=MAP_NAME_MAX)
    data: Optional[dict[str, Any]] = None
    gps_path: Optional[list[Any]] = None
    landmarks: Optional[list[Any]] = None
    theme: Optional[str] = None

    @model_validator(mode="after")
    def require_payload(self):
        if not self.name or (not self.data and (not self.gps_path or not self.theme)):
            raise ValueError("Name and data required")
        return self


class MapRead(CamelModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    name: str
    data: dict[str, Any]
    created_at: datetime


class MapCreated(BaseModel):
    message: str = "Map saved"
    map: MapRead
    link: str


class MapList(BaseModel):
    maps: list[MapRead]


class MapDeleted(BaseModel):
    message: str = "Map deleted"
    id: uuid.UUID
