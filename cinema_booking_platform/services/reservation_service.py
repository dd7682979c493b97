"""
Reservation submission: validated selection + customer details -> confirmed reservation.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..clients.catalog_client import CatalogClient
from ..config import get_settings
from ..schemas.reservation import (
    CheckoutForm,
    CustomerDetails,
    Reservation,
    ReservationRequest,
    ReservationWire
)
from ..utils.exceptions import (
    CatalogAPIError,
    MissingContextError,
    SubmissionError,
    SubmissionInProgressError
)
from ..utils.logging_config import log_business_event
from .checkout_validator import validate_checkout
from .selection import SelectionSnapshot

logger = logging.getLogger(__name__)


class CheckoutState:
    """Submission status of one checkout; at most one request is outstanding."""

    def __init__(self):
        self.in_flight = False
        self.error: Optional[str] = None
        self.reservation: Optional[Reservation] = None


def build_reservation_request(snapshot: SelectionSnapshot, customer: CustomerDetails) -> ReservationRequest:
    return ReservationRequest(
        show_id=snapshot.show_id,
        seat_ids=list(snapshot.seat_ids),
        user=customer,
    )


def merge_reservation_response(
    wire: ReservationWire,
    request: ReservationRequest,
    submitted_at: datetime,
    missing_id: str
) -> Reservation:
    """
    Fill every field the server left out with the locally known value.

    The id falls back to ``missing_id`` and the timestamp to ``submitted_at``.
    A timestamp the server did send is kept exactly as sent.
    """
    user = wire.user
    customer = request.user
    return Reservation(
        id=wire.id or missing_id,
        show_id=wire.show_id or request.show_id,
        seat_ids=list(wire.seat_ids) if wire.seat_ids is not None else list(request.seat_ids),
        user=CustomerDetails(
            name=(user and user.name) or customer.name,
            email=(user and user.email) or customer.email,
            nic=(user and user.nic) or customer.nic,
        ),
        created_at=wire.created_at or submitted_at.isoformat(),
    )


class ReservationService:
    """Submits reservations to the remote service. Never retries."""

    def __init__(self, client: CatalogClient, missing_reservation_id: Optional[str] = None):
        self.client = client
        self.missing_reservation_id = missing_reservation_id or get_settings().missing_reservation_id

    async def submit(
        self,
        session_id: str,
        snapshot: Optional[SelectionSnapshot],
        checkout: CheckoutState,
        form: CheckoutForm
    ) -> Reservation:
        """
        Validate the form and submit the reservation once.

        A checkout that already produced a reservation returns it again
        without contacting the remote service.

        Args:
            session_id: Owning booking session, for logging
            snapshot: Frozen show and seats
            checkout: Submission status of this checkout
            form: Raw customer fields

        Returns:
            The confirmed, fully populated reservation

        Raises:
            MissingContextError: If there is no frozen selection
            SubmissionInProgressError: If a request is already outstanding
            ValidationError: If the form fails validation; nothing is sent
            SubmissionError: If the remote service rejects or cannot be reached
        """
        if checkout.reservation is not None:
            return checkout.reservation
        if snapshot is None or not snapshot.seat_ids:
            raise MissingContextError("Select seats before checking out", redirect_step="seats")
        if checkout.in_flight:
            raise SubmissionInProgressError(session_id)

        customer = validate_checkout(form)
        request = build_reservation_request(snapshot, customer)

        checkout.in_flight = True
        checkout.error = None
        submitted_at = datetime.now(timezone.utc)
        try:
            wire = await self.client.create_reservation(request)
        except CatalogAPIError as exc:
            checkout.error = exc.message
            logger.warning(
                f"Reservation failed for session {session_id}: {exc.message}",
                extra={"session_id": session_id, "status_code": exc.status_code}
            )
            raise SubmissionError(exc) from exc
        finally:
            checkout.in_flight = False

        reservation = merge_reservation_response(wire, request, submitted_at, self.missing_reservation_id)
        checkout.reservation = reservation
        log_business_event(
            "reservation_confirmed",
            {
                "session_id": session_id,
                "reservation_id": reservation.id,
                "show_id": reservation.show_id,
                "seat_count": len(reservation.seat_ids),
            }
        )
        return reservation
