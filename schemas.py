from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

EVENT_TYPES = ("gala", "concert", "marathon", "webinar", "conference", "workshop")
EVENT_STATUSES = ("upcoming", "live", "completed")


class Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    ticket_price: float = Field(default=0.0, alias="ticketPrice", ge=0)
    max_attendees: Optional[int] = Field(default=None, alias="maxAttendees")
    type: Optional[str] = Field(
        default=None, description="gala/concert/marathon/webinar/conference/workshop"
    )
    location: Optional[str] = None
    date: datetime = Field(..., description="ISO8601, naive values are UTC")

    # display-only, never read by the ranker
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    is_virtual: bool = Field(default=False, alias="isVirtual")
    organizer_id: Optional[str] = Field(default=None, alias="organizerId")


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    price_range: Tuple[float, float] = Field(..., alias="priceRange")
    categories: List[str] = []
    location: str = ""
    date_range: Tuple[Optional[float], Optional[float]] = Field(
        default=(None, None),
        alias="dateRange",
        validate_default=True,
        description="epoch millis; null bounds are open",
    )

    @field_validator("categories")
    @classmethod
    def _fold_categories(cls, v):
        return [c.strip().lower() for c in v]

    @field_validator("date_range")
    @classmethod
    def _open_bounds(cls, v):
        lo, hi = v
        return (
            float("-inf") if lo is None else lo,
            float("inf") if hi is None else hi,
        )
