"""
Catalog API endpoints: movies and theatres from the remote service.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..clients.catalog_client import CatalogClient
from ..schemas.catalog import Movie, Theatre
from ..utils.dependencies import get_catalog_client
from ..utils.exceptions import CatalogAPIError, UpstreamFetchError

router = APIRouter(tags=["catalog"])


@router.get("/movies", response_model=List[Movie])
async def list_movies(
    refresh: bool = Query(False, description="Bypass the cached movie list"),
    client: CatalogClient = Depends(get_catalog_client)
):
    """
    Get all movies that are now showing, with their shows.
    """
    try:
        return await client.get_movies(force_refresh=refresh)
    except CatalogAPIError as e:
        raise UpstreamFetchError("movies", e) from e


@router.get("/movies/{movie_id}", response_model=Movie)
async def get_movie(
    movie_id: str,
    client: CatalogClient = Depends(get_catalog_client)
):
    """
    Get a single movie.

    Raises 404 when the movie is not in the catalog.
    """
    try:
        return await client.get_movie(movie_id)
    except CatalogAPIError as e:
        raise UpstreamFetchError("movie", e) from e


@router.get("/theatres", response_model=List[Theatre])
async def list_theatres(client: CatalogClient = Depends(get_catalog_client)):
    """Get all theatres."""
    try:
        return await client.get_theatres()
    except CatalogAPIError as e:
        raise UpstreamFetchError("theatres", e) from e
