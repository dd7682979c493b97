"""
Booking session service: drives one user's selection flow end to end.

Catalog fetches and the reservation request are the only awaits. State
changes happen synchronously before or after them, so a session is never
mutated by two actions at once.
"""

import logging
from datetime import date
from typing import List, Optional

from ..clients.catalog_client import CatalogClient
from ..config import Settings, get_settings
from ..schemas.reservation import CheckoutForm, Reservation
from ..schemas.session import (
    DateOption,
    MovieSummary,
    SeatRowView,
    SeatView,
    SessionView,
    ShowOption
)
from .session_store import BookingSession, SessionStore
from ..utils.exceptions import (
    CatalogAPIError,
    InvalidTransitionError,
    MissingContextError,
    SubmissionInProgressError,
    UpstreamFetchError
)
from ..utils.logging_config import log_business_event
from .confirmation import build_verification_payload, serialize_payload
from .pricing import PricingPolicy
from .reservation_service import ReservationService
from .selection import SeatFetchTicket, SeatSelection, SelectionSnapshot
from .show_grouping import CalendarMonth, build_calendar_month, format_show_time, group_shows_by_date

logger = logging.getLogger(__name__)

CONFIRMED_STEP = "confirmed"


class BookingSessionService:
    """Service for booking session operations."""

    def __init__(
        self,
        client: CatalogClient,
        store: SessionStore,
        pricing: Optional[PricingPolicy] = None,
        settings: Optional[Settings] = None
    ):
        self.client = client
        self.store = store
        self.settings = settings or get_settings()
        self.pricing = pricing or PricingPolicy.from_settings(self.settings)
        self.reservations = ReservationService(client, self.settings.missing_reservation_id)

    async def start_session(self, movie_id: str, today: Optional[date] = None) -> BookingSession:
        """
        Load a movie and open a session on it with no date chosen.

        Raises:
            MovieNotFoundError: If the movie is not in the catalog
            UpstreamFetchError: If the catalog cannot be fetched
        """
        try:
            movie = await self.client.get_movie(movie_id)
        except CatalogAPIError as exc:
            raise UpstreamFetchError("movie", exc) from exc

        selection = SeatSelection(group_shows_by_date(movie.shows, today))
        session = self.store.add(BookingSession(movie, selection))
        log_business_event(
            "session_started",
            {"session_id": session.id, "movie_id": movie.id, "date_count": len(selection.show_groups)}
        )
        return session

    def get_session(self, session_id: str) -> BookingSession:
        return self.store.get(session_id)

    def close_session(self, session_id: str) -> None:
        self.store.get(session_id)
        self.store.delete(session_id)

    def choose_date(self, session_id: str, index: int) -> BookingSession:
        session = self.store.get(session_id)
        session.selection.choose_date(index)
        return session

    def lookup_date(self, session_id: str, date_key: str) -> bool:
        """Choose a date from the calendar; a date without shows changes nothing."""
        session = self.store.get(session_id)
        return session.selection.choose_date_by_key(date_key)

    def calendar(self, session_id: str, year: Optional[int] = None, month: Optional[int] = None) -> CalendarMonth:
        """Month grid of show dates; defaults to the selected date's month, else the current one."""
        session = self.store.get(session_id)
        selection = session.selection
        group = selection.selected_group
        if year is None or month is None:
            reference = group.show_date if group else date.today()
            year, month = year or reference.year, month or reference.month
        return build_calendar_month(
            year,
            month,
            [g.date_key for g in selection.show_groups],
            group.date_key if group else None,
        )

    async def choose_show(self, session_id: str, show_id: str) -> BookingSession:
        """
        Choose a show and load its seats.

        Raises:
            MissingContextError: If no date is chosen
            ShowNotFoundError: If the show is not on the chosen date
            UpstreamFetchError: If the seats cannot be fetched
        """
        session = self.store.get(session_id)
        ticket = session.selection.choose_show(show_id)
        log_business_event("show_chosen", {"session_id": session.id, "show_id": show_id})
        await self._load_seats(session, ticket)
        return session

    async def reload_seats(self, session_id: str) -> BookingSession:
        session = self.store.get(session_id)
        ticket = session.selection.reload_seats()
        await self._load_seats(session, ticket)
        return session

    def toggle_seat(self, session_id: str, seat_id: str) -> BookingSession:
        session = self.store.get(session_id)
        session.selection.toggle_seat(seat_id)
        return session

    def proceed(self, session_id: str) -> SelectionSnapshot:
        session = self.store.get(session_id)
        return session.selection.proceed()

    async def back_to_seats(self, session_id: str) -> BookingSession:
        """
        Return from checkout to seat selection with an empty selection.

        Raises:
            InvalidTransitionError: If the reservation is already confirmed
            SubmissionInProgressError: If the reservation request is still outstanding
        """
        session = self.store.get(session_id)
        if session.checkout.reservation is not None:
            raise InvalidTransitionError("return to seat selection", CONFIRMED_STEP)
        if session.checkout.in_flight:
            raise SubmissionInProgressError(session.id)
        ticket = session.selection.return_to_seats()
        await self._load_seats(session, ticket)
        return session

    async def submit_checkout(self, session_id: str, form: CheckoutForm) -> Reservation:
        """
        Validate the customer details and submit the reservation.

        Raises:
            MissingContextError: If seats have not been confirmed for checkout
            ValidationError: If a field fails validation
            SubmissionInProgressError: If a submission is still outstanding
            SubmissionError: If the remote service rejects the reservation
        """
        session = self.store.get(session_id)
        snapshot = session.selection.snapshot() if session.selection.submitted else None
        return await self.reservations.submit(session.id, snapshot, session.checkout, form)

    def confirmation(self, session_id: str) -> BookingSession:
        """
        Get a session whose reservation is confirmed.

        Raises:
            MissingContextError: If no reservation exists yet
        """
        session = self.store.get(session_id)
        if session.checkout.reservation is None:
            raise MissingContextError("No confirmed reservation for this session", redirect_step="checkout")
        return session

    def confirmation_payload_text(self, session: BookingSession) -> str:
        return serialize_payload(build_verification_payload(session.checkout.reservation))

    def reservation_seat_labels(self, session: BookingSession) -> List[str]:
        labels = {seat.id: seat.label for seat in session.selection.seats}
        return [labels[seat_id] for seat_id in session.checkout.reservation.seat_ids if seat_id in labels]

    def build_view(self, session: BookingSession) -> SessionView:
        """Render the session state for API responses."""
        selection = session.selection
        groups = selection.show_groups
        displayed = groups[:self.settings.max_displayed_dates]
        selected_group = selection.selected_group
        selected_ids = set(selection.selected_seat_ids)

        seat_rows = [
            SeatRowView(
                row=row.row,
                sections=[
                    [
                        SeatView(
                            id=seat.id,
                            label=seat.label,
                            available=seat.is_available,
                            selected=seat.id in selected_ids,
                            price=self.pricing.price_for_label(seat.label),
                        )
                        for seat in section
                    ]
                    for section in row.sections
                ],
            )
            for row in selection.seat_rows
        ]

        step = CONFIRMED_STEP if session.checkout.reservation is not None else selection.step.value
        return SessionView(
            session_id=session.id,
            step=step,
            movie=MovieSummary(id=session.movie.id, title=session.movie.title, image_url=session.movie.image_url),
            dates=[
                DateOption(index=index, date=group.date_key, label=group.label)
                for index, group in enumerate(displayed)
            ],
            has_more_dates=len(groups) > len(displayed),
            selected_date_index=selection.date_index,
            selected_date=selected_group.date_key if selected_group else None,
            shows=[
                ShowOption(
                    id=show.id,
                    theatre_id=show.theatre_id,
                    start_time=show.start_time,
                    end_time=show.end_time,
                    time_label=format_show_time(show.start_time),
                )
                for show in selection.shows_for_selected_date
            ],
            selected_show_id=selection.show_id,
            seats_loading=selection.seats_loading,
            seat_error=selection.seat_error,
            seat_rows=seat_rows,
            selected_seat_ids=list(selection.selected_seat_ids),
            selected_labels=selection.selected_labels,
            selected_summary=", ".join(selection.selected_labels),
            total_price=selection.total_price(self.pricing),
            can_proceed=selection.can_proceed,
            checkout_in_flight=session.checkout.in_flight,
            checkout_error=session.checkout.error,
        )

    async def _load_seats(self, session: BookingSession, ticket: SeatFetchTicket) -> None:
        """Fetch seats for ``ticket``; results for a superseded ticket are dropped."""
        try:
            seats = await self.client.get_seats_by_show(ticket.show_id)
        except CatalogAPIError as exc:
            if session.selection.fail_seat_fetch(ticket, exc.message):
                raise UpstreamFetchError("seats", exc) from exc
            logger.info(f"Ignoring failed stale seat fetch for show {ticket.show_id}")
            return

        if session.selection.apply_seats(ticket, seats):
            logger.debug(f"Loaded {len(seats)} seats for show {ticket.show_id}")
