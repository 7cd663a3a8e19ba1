"""Online disc catalog lookups."""

from .client import CatalogClient, CatalogWebClient, normalize_query
from .scrape import parse_disc_page

__all__ = ["CatalogClient", "CatalogWebClient", "normalize_query", "parse_disc_page"]
