"""
Pydantic schemas for reservation requests, responses and ticket payloads.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerDetails(BaseModel):
    """Normalized customer identity sent with a reservation."""
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    nic: str


class CheckoutForm(BaseModel):
    """Raw checkout fields exactly as the customer typed them."""

    name: str = Field("", description="Full name")
    email: str = Field("", description="Email address")
    nic: str = Field("", description="National identity card number")


class ReservationRequest(BaseModel):
    """Body of ``POST /reservations`` on the remote service."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    show_id: str = Field(..., alias="showId")
    seat_ids: List[str] = Field(..., min_length=1, alias="seatIds")
    user: CustomerDetails


class CustomerDetailsWire(BaseModel):
    """Customer block of a reservation response; the server may omit any field."""

    name: Optional[str] = None
    email: Optional[str] = None
    nic: Optional[str] = None


class ReservationWire(BaseModel):
    """Reservation as returned by the remote service, every field optional."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    show_id: Optional[str] = Field(None, alias="showId")
    seat_ids: Optional[List[str]] = Field(None, alias="seatIds")
    user: Optional[CustomerDetailsWire] = None
    created_at: Optional[str] = Field(None, alias="createdAt")


class Reservation(BaseModel):
    """Fully populated, confirmed reservation."""
    model_config = ConfigDict(frozen=True)

    id: str
    show_id: str
    seat_ids: List[str]
    user: CustomerDetails
    created_at: str = Field(..., description="Creation timestamp exactly as the server sent it")


class VerificationPayload(BaseModel):
    """Privacy-scoped subset of a reservation embedded in the ticket code."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    reservation_id: str = Field("", alias="reservationId")
    show_id: str = Field("", alias="showId")
    seat_ids: List[str] = Field(default_factory=list, alias="seatIds")
    created_at: str = Field("", alias="createdAt")
