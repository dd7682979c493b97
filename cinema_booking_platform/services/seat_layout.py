"""
Seat availability model: rows, sections and selectability of a show's seats.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict

from ..schemas.catalog import SEAT_LABEL_PATTERN, Seat

SECTIONS_PER_ROW = 3


class SeatRow(BaseModel):
    """One row of seats split into left, centre and right sections."""
    model_config = ConfigDict(frozen=True)

    row: str
    sections: Tuple[Tuple[Seat, ...], ...]

    @property
    def seats(self) -> List[Seat]:
        return [seat for section in self.sections for seat in section]


def parse_seat_label(label: str) -> Tuple[str, int]:
    """
    Split a seat label into its row letters and seat number.

    Raises:
        ValueError: If the label is not letters followed by a positive number
    """
    match = SEAT_LABEL_PATTERN.match(label)
    if not match:
        raise ValueError(f"Invalid seat label: {label!r}")
    return match.group(1), int(match.group(2))


def seat_number(label: str) -> int:
    return parse_seat_label(label)[1]


def split_into_sections(seats: List[Seat], sections: int = SECTIONS_PER_ROW) -> Tuple[Tuple[Seat, ...], ...]:
    """Split a sorted row into contiguous sections of ``ceil(n / sections)`` seats, remainder last."""
    size = math.ceil(len(seats) / sections) if seats else 0
    parts = []
    for index in range(sections):
        if index < sections - 1:
            parts.append(tuple(seats[index * size:(index + 1) * size]))
        else:
            parts.append(tuple(seats[index * size:]))
    return tuple(parts)


def build_seat_rows(seats: Iterable[Seat]) -> List[SeatRow]:
    """
    Arrange seats for display.

    Rows are keyed by the leading letters of the label and ordered
    A..Z, AA..ZZ; seats within a row are ordered by number.
    """
    rows: Dict[str, List[Seat]] = defaultdict(list)
    for seat in seats:
        row, _ = parse_seat_label(seat.label)
        rows[row].append(seat)

    return [
        SeatRow(
            row=row,
            sections=split_into_sections(sorted(rows[row], key=lambda seat: seat_number(seat.label))),
        )
        for row in sorted(rows, key=lambda name: (len(name), name))
    ]


def can_toggle(seat: Seat, selected_ids: Iterable[str]) -> bool:
    """A seat may be toggled when it is free or already part of the selection."""
    return seat.is_available or seat.id in set(selected_ids)
