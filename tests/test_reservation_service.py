"""Tests for reservation submission."""

from datetime import datetime, timezone

import httpx
import pytest

from cinema_booking_platform.schemas.reservation import (
    CheckoutForm,
    CustomerDetails,
    ReservationRequest,
    ReservationWire,
)
from cinema_booking_platform.services.confirmation import build_verification_payload, serialize_payload
from cinema_booking_platform.services.reservation_service import (
    CheckoutState,
    ReservationService,
    merge_reservation_response,
)
from cinema_booking_platform.services.selection import SelectionSnapshot
from cinema_booking_platform.utils.exceptions import (
    MissingContextError,
    SubmissionError,
    SubmissionInProgressError,
    ValidationError,
)

VALID_FORM = CheckoutForm(name="Nimal Perera", email="nimal@mail.lk", nic="987654321V")
SUBMITTED_AT = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def snapshot():
    return SelectionSnapshot(show_id="show-evening", seat_ids=("seat-c6", "seat-a1"))


@pytest.fixture
def service(catalog_client):
    return ReservationService(catalog_client, missing_reservation_id="N/A")


@pytest.fixture
def request_body():
    return ReservationRequest(
        show_id="show-evening",
        seat_ids=["seat-c6", "seat-a1"],
        user=CustomerDetails(name="Nimal Perera", email="nimal@mail.lk", nic="987654321V"),
    )


class TestMergeReservationResponse:

    def test_empty_response_falls_back_to_request(self, request_body):
        reservation = merge_reservation_response(ReservationWire(), request_body, SUBMITTED_AT, "N/A")

        assert reservation.id == "N/A"
        assert reservation.show_id == "show-evening"
        assert reservation.seat_ids == ["seat-c6", "seat-a1"]
        assert reservation.user == request_body.user
        assert reservation.created_at == SUBMITTED_AT.isoformat()

    def test_server_values_win(self, request_body):
        wire = ReservationWire.model_validate({
            "id": "r-1",
            "showId": "show-evening",
            "seatIds": ["seat-c6"],
            "user": {"name": "N. Perera"},
            "createdAt": "2024-06-01T09:15:00.000Z",
        })

        reservation = merge_reservation_response(wire, request_body, SUBMITTED_AT, "N/A")

        assert reservation.id == "r-1"
        assert reservation.seat_ids == ["seat-c6"]
        assert reservation.user.name == "N. Perera"
        assert reservation.user.email == "nimal@mail.lk"
        assert reservation.created_at == "2024-06-01T09:15:00.000Z"

    def test_timestamp_kept_exactly_as_sent(self, request_body):
        wire = ReservationWire.model_validate({"id": "r-1", "createdAt": "yesterday"})

        reservation = merge_reservation_response(wire, request_body, SUBMITTED_AT, "N/A")

        assert reservation.created_at == "yesterday"

    def test_empty_timestamp_uses_submission_time(self, request_body):
        wire = ReservationWire.model_validate({"id": "r-1", "createdAt": ""})

        reservation = merge_reservation_response(wire, request_body, SUBMITTED_AT, "N/A")

        assert reservation.created_at == "2024-06-01T09:00:00+00:00"


class TestSubmit:

    @pytest.mark.asyncio
    async def test_successful_submission(self, service, snapshot, catalog_service):
        checkout = CheckoutState()

        reservation = await service.submit("session-1", snapshot, checkout, VALID_FORM)

        assert reservation.id == "3f2a9c1b-7d4e-4c1a-9b8f-0a1b2c3d4e5f"
        assert reservation.seat_ids == ["seat-c6", "seat-a1"]
        assert checkout.reservation == reservation
        assert not checkout.in_flight
        assert catalog_service.count("POST", "/api/reservations") == 1

    @pytest.mark.asyncio
    async def test_missing_fields_fall_back_in_order(self, service, snapshot, catalog_service):
        catalog_service.reservation_override = {"id": "r-77"}

        reservation = await service.submit("session-1", snapshot, CheckoutState(), VALID_FORM)

        assert reservation.id == "r-77"
        assert reservation.show_id == "show-evening"
        assert reservation.seat_ids == ["seat-c6", "seat-a1"]
        assert reservation.user.nic == "987654321V"

    @pytest.mark.asyncio
    async def test_validation_blocks_network_call(self, service, snapshot, catalog_service):
        form = CheckoutForm(name="", email="a@b.com", nic="12345")

        with pytest.raises(ValidationError) as exc_info:
            await service.submit("session-1", snapshot, CheckoutState(), form)

        assert set(exc_info.value.field_errors) == {"name"}
        assert catalog_service.count("POST", "/api/reservations") == 0

    @pytest.mark.asyncio
    async def test_rejection_leaves_form_editable(self, service, snapshot, catalog_service):
        catalog_service.reservation_error = httpx.Response(409, json={"message": "Seat C6 is already taken"})
        checkout = CheckoutState()

        with pytest.raises(SubmissionError) as exc_info:
            await service.submit("session-1", snapshot, checkout, VALID_FORM)

        assert exc_info.value.message == "Seat C6 is already taken"
        assert exc_info.value.status_code == 409
        assert checkout.error == "Seat C6 is already taken"
        assert checkout.reservation is None
        assert not checkout.in_flight

    @pytest.mark.asyncio
    async def test_resubmission_after_failure_is_manual(self, service, snapshot, catalog_service):
        catalog_service.reservation_error = httpx.Response(500)
        checkout = CheckoutState()
        with pytest.raises(SubmissionError):
            await service.submit("session-1", snapshot, checkout, VALID_FORM)
        assert catalog_service.count("POST", "/api/reservations") == 1

        catalog_service.reservation_error = None
        reservation = await service.submit("session-1", snapshot, checkout, VALID_FORM)

        assert reservation.show_id == "show-evening"
        assert checkout.error is None
        assert catalog_service.count("POST", "/api/reservations") == 2

    @pytest.mark.asyncio
    async def test_confirmed_checkout_is_not_resubmitted(self, service, snapshot, catalog_service):
        checkout = CheckoutState()
        first = await service.submit("session-1", snapshot, checkout, VALID_FORM)

        second = await service.submit("session-1", snapshot, checkout, VALID_FORM)

        assert second is first
        assert catalog_service.count("POST", "/api/reservations") == 1

    @pytest.mark.asyncio
    async def test_outstanding_request_blocks_another(self, service, snapshot):
        checkout = CheckoutState()
        checkout.in_flight = True

        with pytest.raises(SubmissionInProgressError):
            await service.submit("session-1", snapshot, checkout, VALID_FORM)

    @pytest.mark.asyncio
    async def test_missing_selection(self, service):
        with pytest.raises(MissingContextError) as exc_info:
            await service.submit("session-1", None, CheckoutState(), VALID_FORM)

        assert exc_info.value.redirect_step == "seats"


@pytest.mark.asyncio
async def test_ticket_payload_uses_server_timestamp(service, snapshot, catalog_service):
    catalog_service.reservation_override = {"id": "r-1", "createdAt": "2024-06-01T09:15:00.000Z"}

    reservation = await service.submit("session-1", snapshot, CheckoutState(), VALID_FORM)

    assert serialize_payload(build_verification_payload(reservation)) == (
        '{"reservationId":"r-1","showId":"show-evening",'
        '"seatIds":["seat-c6","seat-a1"],"createdAt":"2024-06-01T09:15:00.000Z"}'
    )
