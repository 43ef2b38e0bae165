"""Catalog domain models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_THEME = "LEGO"


class Availability(StrEnum):
    AVAILABLE = "available"
    COMING_SOON = "coming_soon"
    SOLD_OUT = "sold_out"
    RETIRING_SOON = "retiring_soon"


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases to the mobile client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CamelModel):
    """A buildable set as stored in the catalog."""

    set_number: str = Field(..., min_length=1, description="Rebrickable set number")
    name: str
    price: float = Field(..., gt=0, description="Baseline price used as discount reference")
    image_url: str
    url: str = Field("", description="Canonical manufacturer store page")
    theme: str = DEFAULT_THEME
    theme_id: int | None = None
    pieces: int | None = Field(None, ge=0)
    year: int | None = None
    availability: Availability = Availability.AVAILABLE
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        """Active products are the ones priced every cycle."""
        return self.availability in (Availability.AVAILABLE, Availability.RETIRING_SOON)
