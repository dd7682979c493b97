"""Tests for the ticket verification payload and its rendering."""

import json

import pytest

from cinema_booking_platform.schemas.reservation import CustomerDetails, Reservation
from cinema_booking_platform.services.confirmation import (
    build_verification_payload,
    decode_payload,
    payload_matches,
    render_ticket_png,
    serialize_payload,
    share_text,
    ticket_filename,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def reservation():
    return Reservation(
        id="3f2a9c1b-7d4e-4c1a-9b8f-0a1b2c3d4e5f",
        show_id="show-evening",
        seat_ids=["seat-c6", "seat-a1"],
        user=CustomerDetails(name="Nimal Perera", email="nimal@mail.lk", nic="987654321V"),
        created_at="2024-06-01T09:15:00+00:00",
    )


def test_serialization_is_stable(reservation):
    first = serialize_payload(build_verification_payload(reservation))
    second = serialize_payload(build_verification_payload(reservation.model_copy()))

    assert first == second
    assert first == (
        '{"reservationId":"3f2a9c1b-7d4e-4c1a-9b8f-0a1b2c3d4e5f","showId":"show-evening",'
        '"seatIds":["seat-c6","seat-a1"],"createdAt":"2024-06-01T09:15:00+00:00"}'
    )


def test_payload_excludes_customer_details(reservation):
    text = serialize_payload(build_verification_payload(reservation))

    assert set(json.loads(text)) == {"reservationId", "showId", "seatIds", "createdAt"}
    for secret in ("Nimal", "nimal@mail.lk", "987654321V"):
        assert secret not in text


def test_decoded_payload_matches_reservation(reservation):
    decoded = decode_payload(serialize_payload(build_verification_payload(reservation)))

    assert payload_matches(decoded, reservation)
    assert not payload_matches(decoded, reservation.model_copy(update={"seat_ids": ["seat-c6"]}))


def test_render_ticket_png(reservation):
    image = render_ticket_png(serialize_payload(build_verification_payload(reservation)), box_size=4, border=2)

    assert image.startswith(PNG_SIGNATURE)


def test_share_text_and_filename(reservation):
    assert share_text(reservation) == "Reservation confirmed. Booking ID: 3f2a9c1b"
    assert ticket_filename(reservation) == "reservation-3f2a9c1b.png"


def test_filename_for_placeholder_id(reservation):
    placeholder = reservation.model_copy(update={"id": "N/A"})

    assert ticket_filename(placeholder) == "reservation-N_A.png"


def test_payload_carries_server_timestamp_verbatim(reservation):
    server_stamped = reservation.model_copy(update={"created_at": "2024-06-01T09:15:00.000Z"})

    text = serialize_payload(build_verification_payload(server_stamped))

    assert json.loads(text)["createdAt"] == "2024-06-01T09:15:00.000Z"
    assert payload_matches(decode_payload(text), server_stamped)
