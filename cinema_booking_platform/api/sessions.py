"""
Booking session API endpoints.

Each endpoint is one user action of the selection flow and returns the
resulting session state.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..schemas.reservation import CheckoutForm
from ..schemas.session import (
    ChooseDateRequest,
    ChooseShowRequest,
    ConfirmationResponse,
    DateLookupRequest,
    DateLookupResponse,
    FieldValidationRequest,
    FieldValidationResponse,
    ProceedResponse,
    SessionView,
    StartSessionRequest
)
from ..services.booking_session_service import BookingSessionService
from ..services.checkout_validator import validate_field
from ..services.confirmation import (
    build_verification_payload,
    render_ticket_png,
    serialize_payload,
    share_text,
    ticket_filename
)
from ..services.show_grouping import CalendarMonth
from ..utils.dependencies import get_session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(
    body: StartSessionRequest,
    service: BookingSessionService = Depends(get_session_service)
):
    """
    Start booking a movie.

    Loads the movie and its shows grouped by date. No date is chosen yet.
    """
    session = await service.start_session(body.movie_id)
    return service.build_view(session)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Get the current state of a booking session."""
    return service.build_view(service.get_session(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Discard a booking session."""
    service.close_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/calendar", response_model=CalendarMonth)
async def get_calendar(
    session_id: str,
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    service: BookingSessionService = Depends(get_session_service)
):
    """
    Get the month calendar of show dates.

    Defaults to the month of the selected date.
    """
    return service.calendar(session_id, year, month)


@router.post("/{session_id}/date", response_model=SessionView)
async def choose_date(
    session_id: str,
    body: ChooseDateRequest,
    service: BookingSessionService = Depends(get_session_service)
):
    """Pick a date; a different date clears the chosen show and seats."""
    return service.build_view(service.choose_date(session_id, body.index))


@router.post("/{session_id}/date/lookup", response_model=DateLookupResponse)
async def lookup_date(
    session_id: str,
    body: DateLookupRequest,
    service: BookingSessionService = Depends(get_session_service)
):
    """
    Pick a date from the calendar.

    A date without shows is ignored and reported with ``matched: false``.
    """
    matched = service.lookup_date(session_id, body.date)
    return DateLookupResponse(matched=matched, session=service.build_view(service.get_session(session_id)))


@router.post("/{session_id}/show", response_model=SessionView)
async def choose_show(
    session_id: str,
    body: ChooseShowRequest,
    service: BookingSessionService = Depends(get_session_service)
):
    """Pick a show time and load its seat map."""
    session = await service.choose_show(session_id, body.show_id)
    return service.build_view(session)


@router.post("/{session_id}/seats/reload", response_model=SessionView)
async def reload_seats(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Load the seat map of the chosen show again."""
    session = await service.reload_seats(session_id)
    return service.build_view(session)


@router.post("/{session_id}/seats/{seat_id}/toggle", response_model=SessionView)
async def toggle_seat(
    session_id: str,
    seat_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Select a free seat or deselect a selected one."""
    return service.build_view(service.toggle_seat(session_id, seat_id))


@router.post("/{session_id}/proceed", response_model=ProceedResponse)
async def proceed_to_checkout(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Freeze the seat selection and move to checkout."""
    snapshot = service.proceed(session_id)
    session = service.get_session(session_id)
    view = service.build_view(session)
    return ProceedResponse(
        show_id=snapshot.show_id,
        seat_ids=list(snapshot.seat_ids),
        total_price=view.total_price,
        session=view,
    )


@router.post("/{session_id}/back", response_model=SessionView)
async def back_to_seats(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Leave checkout for seat selection; the selection starts empty again."""
    session = await service.back_to_seats(session_id)
    return service.build_view(session)


@router.post("/{session_id}/checkout/validate", response_model=FieldValidationResponse)
async def validate_checkout_field(
    session_id: str,
    body: FieldValidationRequest,
    service: BookingSessionService = Depends(get_session_service)
):
    """Validate one checkout field as it is edited."""
    service.get_session(session_id)
    message = validate_field(body.field, body.value)
    return FieldValidationResponse(field=body.field, valid=message is None, message=message)


@router.post("/{session_id}/checkout", response_model=ConfirmationResponse)
async def submit_checkout(
    session_id: str,
    form: CheckoutForm,
    service: BookingSessionService = Depends(get_session_service)
):
    """
    Submit the reservation.

    Invalid fields are reported without contacting the reservation service.
    A failed submission leaves the form editable; nothing is retried.
    """
    await service.submit_checkout(session_id, form)
    return _confirmation_response(service, session_id)


@router.get("/{session_id}/confirmation", response_model=ConfirmationResponse)
async def get_confirmation(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Get the confirmed reservation and its ticket payload."""
    return _confirmation_response(service, session_id)


@router.get(
    "/{session_id}/confirmation/ticket.png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}}
)
async def get_ticket_image(
    session_id: str,
    service: BookingSessionService = Depends(get_session_service)
):
    """Get the scannable ticket code as a PNG image."""
    session = service.confirmation(session_id)
    reservation = session.checkout.reservation
    image = render_ticket_png(service.confirmation_payload_text(session))
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{ticket_filename(reservation)}"'}
    )


def _confirmation_response(service: BookingSessionService, session_id: str) -> ConfirmationResponse:
    session = service.confirmation(session_id)
    reservation = session.checkout.reservation
    payload = build_verification_payload(reservation)
    labels = service.reservation_seat_labels(session)
    return ConfirmationResponse(
        reservation=reservation,
        seat_labels=labels,
        total_price=service.pricing.total(labels),
        payload=payload,
        payload_text=serialize_payload(payload),
        share_text=share_text(reservation),
        ticket_filename=ticket_filename(reservation),
    )
