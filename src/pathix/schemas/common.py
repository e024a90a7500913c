"""Shared schema base.

Learn: The frontend speaks camelCase (accountType, gpsPath, ...) while
the Python side stays snake_case. alias_generator maps between them;
populate_by_name lets tests and services use either spelling, and
FastAPI serializes response models by alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str
