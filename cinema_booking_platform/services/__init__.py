"""Business logic services for the Cinema Booking Platform."""

from .booking_session_service import BookingSessionService
from .pricing import PricingPolicy
from .reservation_service import ReservationService
from .selection import SeatSelection

__all__ = ["BookingSessionService", "PricingPolicy", "ReservationService", "SeatSelection"]
