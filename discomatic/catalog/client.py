"""
HTTP client for the online disc catalog.

Only the low-level request mechanics and the catalog's URL layout live here;
turning a disc page into fields is the job of :mod:`discomatic.catalog.scrape`.

Public methods never raise for network problems: they log the failure and
return ``None`` so that the extraction pipeline can tell "no connectivity"
apart from "no results".  :class:`CatalogConnectionError` is the internal
signal used for that distinction.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Protocol

import requests
import structlog

from discomatic.config.schema import Options
from discomatic.utils.errors import CatalogConnectionError

from .scrape import parse_disc_page

log = structlog.get_logger()

CSRF_TOKEN_RE = re.compile(r'<input type="hidden" name="csrf_token" value="(.*?)" />')
DISC_ID_RE = re.compile(r'<a href="/disc/(\d+)/">')
SINGLE_RESULT_RE = re.compile(r"/disc/(\d+)/?$")
LOGIN_FAILED_TEXT = "Incorrect username and/or password."


class CatalogClient(Protocol):
    """Narrow interface the extraction pipeline depends on."""

    def login(self) -> Optional[bool]:
        """``True`` on success, ``False`` on bad credentials, ``None`` when offline."""

    def search(self, query: str) -> Optional[List[int]]:
        """Return disc IDs matching *query* or ``None`` on a lookup error."""

    def disc_fields(self, disc_id: int) -> Optional[Dict[str, Any]]:
        """Return the scraped fields of *disc_id* or ``None`` on error."""


def normalize_query(query: str) -> str:
    """Return *query* in the form the quick-search URL expects.

    >>> normalize_query('Some "Game" / Part\\\\2')
    'some-game---part/2'
    """
    query = query.replace('"', "").replace("'", "")
    query = query.replace(" ", "-").replace("/", "-").replace("\\", "/")
    return query.lower()


class CatalogWebClient:
    """:class:`CatalogClient` backed by a :class:`requests.Session`.

    Args:
        base_url: Catalog root (``http://redump.org``).
        forum_url: Forum root used for authentication.
        username: Login name; no login is attempted without it.
        password: Login password.
        timeout: Seconds per HTTP request.
        session: Optional pre-built session (tests inject fakes here).
    """

    def __init__(
        self,
        base_url: str,
        forum_url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.forum_url = forum_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_options(cls, options: Options) -> "CatalogWebClient":
        return cls(
            options.catalog_base_url,
            options.catalog_forum_url,
            options.catalog_username,
            options.catalog_password,
            timeout=options.catalog_timeout,
        )

    # ------------------------------------------------------------------ #
    # Low level                                                          #
    # ------------------------------------------------------------------ #
    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise CatalogConnectionError(f"GET {url} failed: {exc}") from exc
        return response

    def _post(self, url: str, data: Dict[str, Any]) -> requests.Response:
        try:
            response = self.session.post(url, data=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise CatalogConnectionError(f"POST {url} failed: {exc}") from exc
        return response

    # ------------------------------------------------------------------ #
    # CatalogClient                                                      #
    # ------------------------------------------------------------------ #
    def login(self) -> Optional[bool]:
        """Log into the forum so that protected search results are visible."""
        if not (self.username and self.password):
            return False
        login_url = f"{self.forum_url}/login/"
        try:
            page = self._get(login_url).text
            match = CSRF_TOKEN_RE.search(page)
            if match is None:
                log.warning("catalog.csrf_missing", url=login_url)
                return None
            response = self._post(
                login_url,
                {
                    "form_sent": "1",
                    "redirect_url": f"{self.forum_url}/",
                    "csrf_token": match.group(1),
                    "req_username": self.username,
                    "req_password": self.password,
                    "save_pass": "0",
                },
            )
        except CatalogConnectionError as exc:
            log.warning("catalog.login_unreachable", error=str(exc))
            return None

        if LOGIN_FAILED_TEXT in response.text:
            log.info("catalog.login_rejected", username=self.username)
            return False
        log.info("catalog.login_ok", username=self.username)
        return True

    def search(self, query: str) -> Optional[List[int]]:
        """Collect every disc ID of the quick search for *query*.

        Pages are fetched until one yields at most one ID.  A search that
        redirects straight to a disc page returns that single ID.
        """
        normalized = normalize_query(query)
        ids: List[int] = []
        page_number = 1
        try:
            while True:
                url = f"{self.base_url}/discs/quicksearch/{normalized}/?page={page_number}"
                response = self._get(url)
                redirected = SINGLE_RESULT_RE.search(response.url or "")
                if redirected:
                    return [int(redirected.group(1))]
                found = [int(value) for value in DISC_ID_RE.findall(response.text)]
                ids.extend(i for i in found if i not in ids)
                if len(found) <= 1:
                    break
                page_number += 1
        except CatalogConnectionError as exc:
            log.warning("catalog.search_failed", query=normalized, error=str(exc))
            return None
        log.debug("catalog.search", query=normalized, results=len(ids))
        return ids

    def fetch_disc_page(self, disc_id: int) -> Optional[str]:
        try:
            return self._get(f"{self.base_url}/disc/{disc_id}/").text
        except CatalogConnectionError as exc:
            log.warning("catalog.fetch_failed", disc_id=disc_id, error=str(exc))
            return None

    def disc_fields(self, disc_id: int) -> Optional[Dict[str, Any]]:
        page = self.fetch_disc_page(disc_id)
        if page is None:
            return None
        return parse_disc_page(page)
