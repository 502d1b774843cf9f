"""
Data service client for signhub.

Handles communication with the signage data service.
"""

from signhub.client.store_client import ContentStoreClient

__all__ = [
    "ContentStoreClient",
]
