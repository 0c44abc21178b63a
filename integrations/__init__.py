"""
Clients for external systems.
"""

from integrations.catalog_client import CatalogClient, get_catalog_client

__all__ = [
    "CatalogClient",
    "get_catalog_client",
]
