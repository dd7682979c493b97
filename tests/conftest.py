"""Shared fixtures: a fake remote catalog service and an application client."""

import asyncio
import json
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from cinema_booking_platform.clients.catalog_client import CatalogClient
from cinema_booking_platform.config import Settings
from cinema_booking_platform.main import create_app
from cinema_booking_platform.schemas.catalog import Movie, Seat
from cinema_booking_platform.services.session_store import SessionStore

CATALOG_URL = "http://catalog.test/api"
TODAY = date(2024, 6, 1)


def make_show(show_id: str, start: str, end: str, theatre_id: str = "theatre-1") -> Dict[str, Any]:
    return {"id": show_id, "theatre_id": theatre_id, "start_time": start, "end_time": end}


def make_seat(seat_id: str, label: str, reserved: bool = False) -> Dict[str, Any]:
    return {
        "id": seat_id,
        "theatre_id": "theatre-1",
        "label": label,
        "created_at": "2024-05-01T00:00:00",
        "reservationStatus": reserved,
    }


MOVIES: List[Dict[str, Any]] = [
    {
        "id": "movie-1",
        "title": "The Long Night",
        "image_url": "https://img.test/long-night.jpg",
        "created_at": "2024-05-01T00:00:00",
        "shows": [
            make_show("show-evening", "2024-06-01T18:00:00", "2024-06-01T20:00:00"),
            make_show("show-morning", "2024-06-01T10:30:00", "2024-06-01T12:30:00"),
            make_show("show-sunday", "2024-06-02T14:00:00", "2024-06-02T16:00:00", "theatre-2"),
            make_show("show-wednesday", "2024-06-05T21:15:00", "2024-06-05T23:15:00"),
        ],
    },
    {
        "id": "movie-2",
        "title": "Quiet Harbour",
        "image_url": None,
        "shows": [],
    },
]

THEATRES: List[Dict[str, Any]] = [
    {"id": "theatre-1", "name": "Majestic City", "rating": "4.5", "location": "Colombo"},
    {"id": "theatre-2", "name": "Liberty Lite", "rating": "4.1", "location": "Kollupitiya"},
]

SEATS: Dict[str, List[Dict[str, Any]]] = {
    "show-evening": [
        make_seat("seat-a10", "A10"),
        make_seat("seat-a2", "A2", reserved=True),
        make_seat("seat-a1", "A1"),
        make_seat("seat-b1", "B1"),
        make_seat("seat-c6", "C6"),
        make_seat("seat-c9", "C9"),
    ],
    "show-morning": [
        make_seat("seat-a1", "A1", reserved=True),
        make_seat("seat-a5", "A5"),
    ],
    "show-sunday": [
        make_seat("seat-d7", "D7"),
    ],
}


class FakeCatalogService:
    """In-memory stand-in for the remote catalog and reservation API."""

    def __init__(self):
        self.movies = [dict(movie) for movie in MOVIES]
        self.theatres = list(THEATRES)
        self.seats = {show_id: list(seats) for show_id, seats in SEATS.items()}
        self.reservation_override: Optional[Dict[str, Any]] = None
        self.reservation_error: Optional[httpx.Response] = None
        self.fail_paths: Dict[str, httpx.Response] = {}
        self.network_down = False
        self.reservation_started: Optional[asyncio.Event] = None
        self.reservation_gate: Optional[asyncio.Event] = None
        self.requests: List[httpx.Request] = []

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def reserve(self, seat_id: str, show_id: str = "show-evening"):
        self.seats[show_id] = [
            {**seat, "reservationStatus": True} if seat["id"] == seat_id else seat
            for seat in self.seats[show_id]
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_down:
            raise httpx.ConnectError("", request=request)

        path = request.url.path
        if path in self.fail_paths:
            return self.fail_paths[path]

        if request.method == "GET" and path == "/api/movies":
            return httpx.Response(200, json=self.movies)
        if request.method == "GET" and path == "/api/theatres":
            return httpx.Response(200, json=self.theatres)
        if request.method == "GET" and path.startswith("/api/seats/by-show/"):
            show_id = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.seats.get(show_id, []))
        if request.method == "POST" and path == "/api/reservations":
            if self.reservation_gate is not None:
                self.reservation_started.set()
                await self.reservation_gate.wait()
            if self.reservation_error is not None:
                return self.reservation_error
            body = json.loads(request.content)
            if self.reservation_override is not None:
                return httpx.Response(201, json=self.reservation_override)
            return httpx.Response(201, json={
                "id": "3f2a9c1b-7d4e-4c1a-9b8f-0a1b2c3d4e5f",
                "showId": body["showId"],
                "seatIds": body["seatIds"],
                "user": body["user"],
                "createdAt": "2024-06-01T09:15:00+00:00",
            })
        return httpx.Response(404, json={"message": f"Cannot {request.method} {path}"})


@pytest.fixture
def catalog_service():
    return FakeCatalogService()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        catalog_base_url=CATALOG_URL,
        debug=False,
        enable_request_logging=True,
    )


@pytest_asyncio.fixture
async def catalog_client(catalog_service):
    client = CatalogClient(
        base_url=CATALOG_URL,
        timeout=5.0,
        cache_ttl_seconds=300,
        transport=httpx.MockTransport(catalog_service.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def app(test_settings, catalog_client):
    return create_app(
        settings=test_settings,
        catalog_client=catalog_client,
        session_store=SessionStore(ttl_seconds=1800, max_sessions=100),
    )


@pytest_asyncio.fixture
async def api_client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def movie():
    return Movie.model_validate(MOVIES[0])


@pytest.fixture
def evening_seats():
    return [Seat.model_validate(seat) for seat in SEATS["show-evening"]]
