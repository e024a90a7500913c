"""Pydantic schemas for themes."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pathix.schemas.common import CamelModel


class ThemeAsset(BaseModel):
    name: str = Field(..., min_length=1)
    icon: str = Field(..., min_length=1)  # emoji or image URL


class RoadStyle(CamelModel):
    color: Optional[str] = None
    width: Optional[float] = None
    line_cap: Optional[str] = None
    line_join: Optional[str] = None


class ThemeAnimations(CamelModel):
    """Animation toggles. Unknown toggles are kept as-is."""

    model_config = ConfigDict(extra="allow")

    glowing_road: bool = False
    pulsing_icons: bool = False


class ThemeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    assets: list[ThemeAsset] = Field(default_factory=list)
    background_image: Optional[str] = None
    fonts: list[str] = Field(default_factory=list)
    road_style: RoadStyle = Field(default_factory=RoadStyle)
    animations: ThemeAnimations = Field(default_factory=ThemeAnimations)


class ThemeRead(CamelModel):
    id: uuid.UUID
    name: str
    assets: list[ThemeAsset]
    background_image: Optional[str] = None
    fonts: list[str]
    road_style: RoadStyle
    animations: ThemeAnimations
    created_at: datetime
    updated_at: datetime
