"""
Pydantic schemas for catalog records served by the remote service.

Field aliases follow the remote wire format; attribute names are snake_case.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Row letters followed by a positive seat number without a leading zero.
SEAT_LABEL_PATTERN = re.compile(r"^([A-Za-z]+)([1-9][0-9]*)$")


class Show(BaseModel):
    """A single scheduled screening of a movie at a theatre."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    theatre_id: str
    start_time: datetime
    end_time: datetime

    @model_validator(mode="after")
    def end_after_start(self):
        """Validate that the show ends after it starts."""
        if self.end_time <= self.start_time:
            raise ValueError("Show end_time must be after start_time")
        return self


class Movie(BaseModel):
    """A movie with its embedded shows."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    shows: List[Show] = Field(default_factory=list)


class Theatre(BaseModel):
    """A theatre listed by the remote service."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    image_url: Optional[str] = None
    rating: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None


class Seat(BaseModel):
    """A bookable seat with its reservation status for one show."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    theatre_id: Optional[str] = None
    label: str = Field(..., pattern=SEAT_LABEL_PATTERN.pattern)
    created_at: Optional[datetime] = None
    reservation_status: Optional[bool] = Field(None, alias="reservationStatus")

    @property
    def is_available(self) -> bool:
        return not self.reservation_status
