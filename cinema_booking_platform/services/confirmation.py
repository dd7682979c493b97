"""
Ticket verification payload and its scannable code.

The payload never carries the customer name, email or NIC.
"""

import io
import json
import re
from typing import Optional

import qrcode

from ..config import get_settings
from ..schemas.reservation import Reservation, VerificationPayload

SHORT_ID_LENGTH = 8


def build_verification_payload(reservation: Reservation) -> VerificationPayload:
    return VerificationPayload(
        reservation_id=reservation.id or "",
        show_id=reservation.show_id or "",
        seat_ids=list(reservation.seat_ids or []),
        created_at=reservation.created_at or "",
    )


def serialize_payload(payload: VerificationPayload) -> str:
    """Encode the payload as compact JSON with a fixed key order."""
    return json.dumps(
        {
            "reservationId": payload.reservation_id,
            "showId": payload.show_id,
            "seatIds": list(payload.seat_ids),
            "createdAt": payload.created_at,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )


def decode_payload(text: str) -> VerificationPayload:
    """Decode a scanned payload."""
    return VerificationPayload.model_validate_json(text)


def payload_matches(payload: VerificationPayload, reservation: Reservation) -> bool:
    """Check a decoded payload against the reservation it was built from."""
    return payload == build_verification_payload(reservation)


def render_ticket_png(
    payload_text: str,
    box_size: Optional[int] = None,
    border: Optional[int] = None
) -> bytes:
    """Render the payload as a QR code PNG with square modules of ``box_size`` pixels."""
    settings = get_settings()
    qr = qrcode.QRCode(
        box_size=box_size or settings.ticket_qr_box_size,
        border=settings.ticket_qr_border if border is None else border,
    )
    qr.add_data(payload_text)
    qr.make(fit=True)
    image = qr.make_image()

    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def short_reservation_id(reservation: Reservation) -> str:
    return (reservation.id or "")[:SHORT_ID_LENGTH]


def share_text(reservation: Reservation) -> str:
    return f"Reservation confirmed. Booking ID: {short_reservation_id(reservation)}"


def ticket_filename(reservation: Reservation) -> str:
    """Download name for the ticket image, e.g. ``reservation-3f2a9c1b.png``."""
    short_id = re.sub(r"[^A-Za-z0-9-]", "_", short_reservation_id(reservation)) or "ticket"
    return f"reservation-{short_id}.png"
