"""Archive access over HTTP."""

from src.replay.fetch.http import HttpCatalogClient, HttpSegmentFetcher

__all__ = ["HttpCatalogClient", "HttpSegmentFetcher"]
