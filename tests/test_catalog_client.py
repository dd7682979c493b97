"""Tests for the remote catalog client."""

import httpx
import pytest

from cinema_booking_platform.schemas.reservation import CustomerDetails, ReservationRequest
from cinema_booking_platform.utils.exceptions import CatalogAPIError, MovieNotFoundError


@pytest.mark.asyncio
async def test_get_movies_parses_shows(catalog_client):
    movies = await catalog_client.get_movies()

    assert [m.id for m in movies] == ["movie-1", "movie-2"]
    assert len(movies[0].shows) == 4
    assert movies[1].image_url is None


@pytest.mark.asyncio
async def test_movie_list_is_cached(catalog_client, catalog_service):
    await catalog_client.get_movies()
    await catalog_client.get_movie("movie-2")
    assert catalog_service.count("GET", "/api/movies") == 1

    await catalog_client.get_movies(force_refresh=True)
    assert catalog_service.count("GET", "/api/movies") == 2


@pytest.mark.asyncio
async def test_unknown_movie(catalog_client):
    with pytest.raises(MovieNotFoundError):
        await catalog_client.get_movie("movie-404")


@pytest.mark.asyncio
async def test_seats_are_fetched_every_time(catalog_client, catalog_service):
    first = await catalog_client.get_seats_by_show("show-evening")
    catalog_service.reserve("seat-a1")
    second = await catalog_client.get_seats_by_show("show-evening")

    seat_a1 = {seat.id: seat for seat in first}["seat-a1"]
    assert seat_a1.is_available
    assert not {seat.id: seat for seat in second}["seat-a1"].is_available
    assert catalog_service.count("GET", "/api/seats/by-show/show-evening") == 2


@pytest.mark.asyncio
async def test_theatres(catalog_client):
    theatres = await catalog_client.get_theatres()

    assert [t.name for t in theatres] == ["Majestic City", "Liberty Lite"]


@pytest.mark.asyncio
async def test_error_uses_server_message(catalog_client, catalog_service):
    catalog_service.fail_paths["/api/theatres"] = httpx.Response(
        503, json={"message": "Catalog is under maintenance"}
    )

    with pytest.raises(CatalogAPIError) as exc_info:
        await catalog_client.get_theatres()

    assert exc_info.value.message == "Catalog is under maintenance"
    assert exc_info.value.status_code == 503
    assert exc_info.value.body == {"message": "Catalog is under maintenance"}


@pytest.mark.asyncio
async def test_error_without_message_uses_reason_phrase(catalog_client, catalog_service):
    catalog_service.fail_paths["/api/seats/by-show/show-evening"] = httpx.Response(500, text="oops")

    with pytest.raises(CatalogAPIError) as exc_info:
        await catalog_client.get_seats_by_show("show-evening")

    assert exc_info.value.message == "API request failed: Internal Server Error"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_network_failure_has_no_status(catalog_client, catalog_service):
    catalog_service.network_down = True

    with pytest.raises(CatalogAPIError) as exc_info:
        await catalog_client.get_movies()

    assert exc_info.value.status_code is None
    assert exc_info.value.message == "Network request failed"


@pytest.mark.asyncio
async def test_malformed_seat_label_is_an_api_error(catalog_client, catalog_service):
    catalog_service.seats["show-evening"] = [{"id": "bad", "label": "A01", "reservationStatus": False}]

    with pytest.raises(CatalogAPIError):
        await catalog_client.get_seats_by_show("show-evening")


@pytest.mark.asyncio
async def test_create_reservation_sends_wire_format(catalog_client, catalog_service):
    request = ReservationRequest(
        show_id="show-evening",
        seat_ids=["seat-c6"],
        user=CustomerDetails(name="Nimal Perera", email="nimal@mail.lk", nic="987654321V"),
    )

    wire = await catalog_client.create_reservation(request)

    sent = catalog_service.requests[-1]
    assert sent.method == "POST"
    assert sent.headers["content-type"] == "application/json"
    assert wire.id == "3f2a9c1b-7d4e-4c1a-9b8f-0a1b2c3d4e5f"
    assert wire.show_id == "show-evening"
    assert wire.seat_ids == ["seat-c6"]
    assert wire.user.nic == "987654321V"
