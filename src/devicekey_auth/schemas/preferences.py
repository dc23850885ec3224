"""User preference schemas."""

from typing import Literal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .common import CamelModel


class UserPreferences(CamelModel):
    """Preferences returned alongside every issued token.

    Every field is optional; a user who never saved preferences gets an object
    with all fields null.
    """

    lang: str | None = None
    distance_unit: Literal["METERS", "IMPERIAL"] | None = None
    hour_format: Literal["H12", "H24"] | None = None
    date_format: Literal["dd/mm/yyyy", "m/d/yyyy"] | None = None
    theme: Literal["SYSTEM", "DARK", "LIGHT"] | None = None
    trace_min_meters: int | None = Field(default=None, ge=0)
    trace_min_millis: int | None = Field(default=None, ge=0)
    photo_max_pixels: int | None = Field(default=None, ge=0)
    photo_max_quality: int | None = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
