"""
Adapters package for the Hansard pipeline.

Upstream data source clients.
"""

from .hansard_client import HansardAPIError, HansardClient, MAX_SEARCH_PAGE_SIZE

__all__ = [
    "HansardAPIError",
    "HansardClient",
    "MAX_SEARCH_PAGE_SIZE",
]
