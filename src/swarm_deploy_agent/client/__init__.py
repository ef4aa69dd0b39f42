"""Clients for external services."""

from .remote_config import FetchResult, RemoteConfigFetcher

__all__ = ["FetchResult", "RemoteConfigFetcher"]
