"""
HTTP client for the remote catalog and reservation service.
"""

import logging
import time
from typing import Any, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..config import get_settings
from ..schemas.catalog import Movie, Seat, Theatre
from ..schemas.reservation import ReservationRequest, ReservationWire
from ..utils.exceptions import CatalogAPIError, MovieNotFoundError
from ..utils.logging_config import log_performance

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogClient:
    """Async client for ``/movies``, ``/theatres``, ``/seats`` and ``/reservations``.

    Every failure surfaces as :class:`CatalogAPIError`: HTTP errors carry the
    status code and decoded error body, network errors carry neither.
    Nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_ttl_seconds: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        settings = get_settings()
        self.base_url = base_url or settings.catalog_base_url
        self.cache_ttl_seconds = (
            settings.catalog_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.catalog_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._movies: Optional[List[Movie]] = None
        self._movies_fetched_at = 0.0

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def get_movies(self, force_refresh: bool = False) -> List[Movie]:
        """
        Get all movies with their shows.

        The list is cached for ``cache_ttl_seconds``; movies are immutable once fetched.
        """
        now = time.monotonic()
        if (
            not force_refresh
            and self._movies is not None
            and now - self._movies_fetched_at < self.cache_ttl_seconds
        ):
            return self._movies

        data = await self._request("GET", "/movies")
        movies = self._parse(List[Movie], data, "movies")
        self._movies = movies
        self._movies_fetched_at = now
        logger.info(f"Fetched {len(movies)} movies from catalog")
        return movies

    async def get_movie(self, movie_id: str) -> Movie:
        """
        Get a single movie.

        The remote service has no lookup by id, so the movie list is scanned.

        Raises:
            MovieNotFoundError: If no movie has this id
            CatalogAPIError: If the movie list cannot be fetched
        """
        for movie in await self.get_movies():
            if movie.id == movie_id:
                return movie
        raise MovieNotFoundError(movie_id)

    async def get_theatres(self) -> List[Theatre]:
        """Get all theatres."""
        data = await self._request("GET", "/theatres")
        return self._parse(List[Theatre], data, "theatres")

    async def get_seats_by_show(self, show_id: str) -> List[Seat]:
        """Get the seats of a show with their per-show reservation status. Never cached."""
        data = await self._request("GET", f"/seats/by-show/{quote(show_id, safe='')}")
        return self._parse(List[Seat], data, "seats")

    async def create_reservation(self, request: ReservationRequest) -> ReservationWire:
        """
        Submit a reservation.

        Args:
            request: Show, seats and customer details

        Returns:
            The server's reservation record, possibly with fields missing
        """
        data = await self._request(
            "POST",
            "/reservations",
            json=request.model_dump(mode="json", by_alias=True),
        )
        if not isinstance(data, dict):
            data = {}
        return self._parse(ReservationWire, data, "reservation")

    async def _request(self, method: str, endpoint: str, json: Any = None) -> Any:
        """Send a request and decode its JSON body."""
        start_time = time.perf_counter()
        try:
            response = await self._client.request(method, endpoint, json=json)
        except httpx.HTTPError as exc:
            logger.warning(f"Catalog request {method} {endpoint} failed: {exc!r}")
            raise CatalogAPIError(str(exc) or "Network request failed") from exc
        finally:
            log_performance(f"catalog {method} {endpoint}", time.perf_counter() - start_time)

        if response.is_error:
            body = self._decode_error_body(response)
            message = None
            if isinstance(body, dict):
                message = body.get("message")
            if not message:
                message = f"API request failed: {response.reason_phrase}"
            logger.warning(
                f"Catalog request {method} {endpoint} returned {response.status_code}",
                extra={"status_code": response.status_code}
            )
            raise CatalogAPIError(message, status_code=response.status_code, body=body)

        try:
            return response.json()
        except ValueError as exc:
            raise CatalogAPIError(
                "Malformed response from catalog service",
                status_code=response.status_code
            ) from exc

    @staticmethod
    def _decode_error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _parse(model: Type[T], data: Any, resource: str) -> T:
        try:
            return TypeAdapter(model).validate_python(data)
        except PydanticValidationError as exc:
            logger.error(f"Catalog returned malformed {resource}: {exc.error_count()} errors")
            raise CatalogAPIError(f"Malformed {resource} response from catalog service") from exc
