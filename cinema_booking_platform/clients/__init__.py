"""Clients for services the platform depends on."""

from .catalog_client import CatalogClient

__all__ = ["CatalogClient"]
