"""
Pydantic schemas for the booking session API.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .reservation import Reservation, VerificationPayload


class StartSessionRequest(BaseModel):
    """Schema for starting a booking session."""
    movie_id: str = Field(..., min_length=1, description="Movie to book")


class ChooseDateRequest(BaseModel):
    """Schema for picking one of the displayed dates."""
    index: int = Field(..., ge=0, description="Position of the date group")


class DateLookupRequest(BaseModel):
    """Schema for picking a date from the month calendar."""
    date: str = Field(..., description="ISO date, e.g. 2024-06-01")


class ChooseShowRequest(BaseModel):
    """Schema for picking a show time."""
    show_id: str = Field(..., min_length=1)


class FieldValidationRequest(BaseModel):
    """Schema for validating one checkout field while it is edited."""
    field: Literal["name", "email", "nic"]
    value: str = ""


class FieldValidationResponse(BaseModel):
    """Schema for a single field validation result."""
    field: str
    valid: bool
    message: Optional[str] = None


class MovieSummary(BaseModel):
    id: str
    title: str
    image_url: Optional[str] = None


class DateOption(BaseModel):
    index: int
    date: str
    label: str


class ShowOption(BaseModel):
    id: str
    theatre_id: str
    start_time: datetime
    end_time: datetime
    time_label: str


class SeatView(BaseModel):
    id: str
    label: str
    available: bool
    selected: bool
    price: Decimal


class SeatRowView(BaseModel):
    row: str
    sections: List[List[SeatView]]


class SessionView(BaseModel):
    """Schema for the full state of a booking session."""
    session_id: str
    step: str
    movie: MovieSummary
    dates: List[DateOption]
    has_more_dates: bool
    selected_date_index: Optional[int] = None
    selected_date: Optional[str] = None
    shows: List[ShowOption] = []
    selected_show_id: Optional[str] = None
    seats_loading: bool = False
    seat_error: Optional[str] = None
    seat_rows: List[SeatRowView] = []
    selected_seat_ids: List[str] = []
    selected_labels: List[str] = []
    selected_summary: str = ""
    total_price: Decimal = Decimal("0")
    can_proceed: bool = False
    checkout_in_flight: bool = False
    checkout_error: Optional[str] = None


class DateLookupResponse(BaseModel):
    """Schema for the calendar lookup result."""
    matched: bool
    session: SessionView


class ProceedResponse(BaseModel):
    """Schema for the frozen selection handed to checkout."""
    show_id: str
    seat_ids: List[str]
    total_price: Decimal
    session: SessionView


class ConfirmationResponse(BaseModel):
    """Schema for a confirmed reservation and its ticket payload."""
    reservation: Reservation
    seat_labels: List[str]
    total_price: Decimal
    payload: VerificationPayload
    payload_text: str
    share_text: str
    ticket_filename: str
