"""
Selection state machine for the date -> show -> seats -> checkout flow.

Every transition is driven by an explicit user action or by a resolved
seat fetch. Seat fetches are described by tickets; a ticket that no longer
matches the current show is stale and its result is discarded.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..schemas.catalog import Seat, Show
from ..utils.exceptions import (
    InvalidTransitionError,
    MissingContextError,
    SeatMapLoadingError,
    SeatNotAvailableError,
    SeatNotFoundError,
    ShowNotFoundError,
    ValidationError
)
from .pricing import PricingPolicy
from .seat_layout import SeatRow, build_seat_rows, can_toggle
from .show_grouping import ShowGroup, find_group_index

logger = logging.getLogger(__name__)


class SelectionStep(str, Enum):
    """Steps of the selection flow, in order."""
    NO_DATE = "no_date"
    DATE_CHOSEN = "date_chosen"
    SHOW_CHOSEN = "show_chosen"
    SEATS_CHOSEN = "seats_chosen"
    SUBMITTED = "submitted"


class SeatFetchTicket(BaseModel):
    """Identifies one seat fetch issued for a show."""
    model_config = ConfigDict(frozen=True)

    show_id: str
    generation: int


class SelectionSnapshot(BaseModel):
    """Frozen selection handed to reservation submission."""
    model_config = ConfigDict(frozen=True)

    show_id: str
    seat_ids: Tuple[str, ...]


class SeatSelection:
    """Session-scoped selection state for one movie."""

    def __init__(self, show_groups: List[ShowGroup]):
        self.show_groups = list(show_groups)
        self.date_index: Optional[int] = None
        self.show_id: Optional[str] = None
        self.seats: List[Seat] = []
        self.seats_loading = False
        self.seat_error: Optional[str] = None
        self.selected_seat_ids: List[str] = []
        self.submitted = False
        self._fetch_generation = 0

    @property
    def step(self) -> SelectionStep:
        if self.submitted:
            return SelectionStep.SUBMITTED
        if self.selected_seat_ids:
            return SelectionStep.SEATS_CHOSEN
        if self.show_id is not None:
            return SelectionStep.SHOW_CHOSEN
        if self.date_index is not None:
            return SelectionStep.DATE_CHOSEN
        return SelectionStep.NO_DATE

    @property
    def selected_group(self) -> Optional[ShowGroup]:
        if self.date_index is None:
            return None
        return self.show_groups[self.date_index]

    @property
    def shows_for_selected_date(self) -> List[Show]:
        group = self.selected_group
        return list(group.shows) if group else []

    @property
    def can_proceed(self) -> bool:
        return not self.submitted and bool(self.selected_seat_ids)

    def choose_date(self, index: int) -> None:
        """
        Select a date group by position.

        Picking a different date discards the chosen show and seats.

        Raises:
            InvalidTransitionError: If the selection was already submitted
            ValidationError: If ``index`` does not name a group
        """
        self._ensure_editable("choose a date")
        if not 0 <= index < len(self.show_groups):
            raise ValidationError(
                f"Date index {index} is out of range",
                field_errors={"index": f"Must be between 0 and {len(self.show_groups) - 1}"}
            )
        if index == self.date_index:
            return

        self.date_index = index
        self._clear_show()
        logger.debug(f"Date chosen: {self.show_groups[index].date_key}")

    def choose_date_by_key(self, date_key: str) -> bool:
        """Select the group whose date equals ``date_key``; unknown dates are ignored."""
        index = find_group_index(self.show_groups, date_key)
        if index is None:
            logger.debug(f"Calendar lookup for {date_key} matched no show date")
            return False
        self.choose_date(index)
        return True

    def choose_show(self, show_id: str) -> SeatFetchTicket:
        """
        Select a show of the chosen date and start loading its seats.

        Returns:
            Ticket the caller passes back with the fetch result

        Raises:
            MissingContextError: If no date is chosen
            ShowNotFoundError: If the show is not on the chosen date
        """
        self._ensure_editable("choose a show")
        if self.date_index is None:
            raise MissingContextError("Choose a date before choosing a show", redirect_step="date")
        if not any(show.id == show_id for show in self.shows_for_selected_date):
            raise ShowNotFoundError(show_id)

        if show_id != self.show_id:
            self.selected_seat_ids = []
        self.show_id = show_id
        return self._start_seat_fetch()

    def reload_seats(self) -> SeatFetchTicket:
        """Fetch the seats of the current show again."""
        self._ensure_editable("reload seats")
        if self.show_id is None:
            raise MissingContextError("Choose a show before loading seats", redirect_step="show")
        return self._start_seat_fetch()

    def is_current(self, ticket: SeatFetchTicket) -> bool:
        return ticket.show_id == self.show_id and ticket.generation == self._fetch_generation

    def apply_seats(self, ticket: SeatFetchTicket, seats: List[Seat]) -> bool:
        """Install a fetch result; stale results are dropped and False is returned."""
        if not self.is_current(ticket):
            logger.info(f"Discarding stale seat fetch for show {ticket.show_id}")
            return False
        self.seats = list(seats)
        self.seats_loading = False
        self.seat_error = None
        return True

    def fail_seat_fetch(self, ticket: SeatFetchTicket, message: str) -> bool:
        if not self.is_current(ticket):
            return False
        self.seats = []
        self.seats_loading = False
        self.seat_error = message
        return True

    def toggle_seat(self, seat_id: str) -> bool:
        """
        Add a free seat to the selection or remove a selected one.

        Removal always succeeds, even if the seat has since been reserved
        by someone else.

        Returns:
            True if the seat is selected after the call

        Raises:
            MissingContextError: If no show is chosen
            SeatMapLoadingError: If the seat fetch has not resolved
            SeatNotFoundError: If the seat is not part of the show
            SeatNotAvailableError: If the seat is reserved
        """
        self._ensure_editable("change seats")
        if self.show_id is None:
            raise MissingContextError("Choose a show before selecting seats", redirect_step="show")

        if seat_id in self.selected_seat_ids:
            self.selected_seat_ids.remove(seat_id)
            return False

        if self.seats_loading:
            raise SeatMapLoadingError(self.show_id)
        seat = self._find_seat(seat_id)
        if seat is None:
            raise SeatNotFoundError(seat_id)
        if not can_toggle(seat, self.selected_seat_ids):
            raise SeatNotAvailableError(seat_id, seat.label)

        self.selected_seat_ids.append(seat_id)
        return True

    def proceed(self) -> SelectionSnapshot:
        """
        Freeze the selection for checkout.

        Raises:
            MissingContextError: If no seat is selected
        """
        if self.submitted:
            return self.snapshot()
        if self.show_id is None:
            raise MissingContextError("Choose a show before checking out", redirect_step="show")
        if not self.selected_seat_ids:
            raise MissingContextError("Select at least one seat before checking out", redirect_step="seats")

        self.submitted = True
        return self.snapshot()

    def snapshot(self) -> SelectionSnapshot:
        if not self.submitted or self.show_id is None:
            raise MissingContextError("No seat selection has been submitted", redirect_step="seats")
        return SelectionSnapshot(show_id=self.show_id, seat_ids=tuple(self.selected_seat_ids))

    def return_to_seats(self) -> SeatFetchTicket:
        """
        Go back from checkout to seat selection.

        The show is kept but the seat selection is emptied and seats are
        fetched again, since availability may have changed meanwhile.
        """
        if self.show_id is None:
            raise MissingContextError("Choose a show before selecting seats", redirect_step="show")
        self.submitted = False
        self.selected_seat_ids = []
        return self._start_seat_fetch()

    @property
    def seat_rows(self) -> List[SeatRow]:
        return build_seat_rows(self.seats)

    @property
    def selected_seats(self) -> List[Seat]:
        """Selected seats known in the current seat list, in selection order."""
        seats = []
        for seat_id in self.selected_seat_ids:
            seat = self._find_seat(seat_id)
            if seat is not None:
                seats.append(seat)
        return seats

    @property
    def selected_labels(self) -> List[str]:
        return [seat.label for seat in self.selected_seats]

    def total_price(self, policy: PricingPolicy) -> Decimal:
        return policy.total(self.selected_labels)

    def _start_seat_fetch(self) -> SeatFetchTicket:
        self._fetch_generation += 1
        self.seats = []
        self.seats_loading = True
        self.seat_error = None
        return SeatFetchTicket(show_id=self.show_id, generation=self._fetch_generation)

    def _clear_show(self) -> None:
        self.show_id = None
        self.seats = []
        self.seats_loading = False
        self.seat_error = None
        self.selected_seat_ids = []
        # Any fetch still in flight belongs to the discarded show.
        self._fetch_generation += 1

    def _find_seat(self, seat_id: str) -> Optional[Seat]:
        for seat in self.seats:
            if seat.id == seat_id:
                return seat
        return None

    def _ensure_editable(self, action: str) -> None:
        if self.submitted:
            raise InvalidTransitionError(action, self.step.value)
