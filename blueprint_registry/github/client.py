"""Thin HTTP wrapper around the GitHub REST API and raw content host.

Adds the GitHub media type and, when configured, a bearer token to every
request, and turns non-2xx responses and transport failures into
:class:`~blueprint_registry.errors.FetchError`.
"""

from __future__ import annotations

import logging

import httpx

from blueprint_registry.config import DEFAULT_API_URL, DEFAULT_RAW_URL, DEFAULT_TIMEOUT, SyncConfig
from blueprint_registry.errors import FetchError

logger = logging.getLogger(__name__)

# Characters of a failed response body kept on the error
BODY_EXCERPT_CHARS = 500


class GitHubClient:
    """Synchronous GitHub client.

    Parameters
    ----------
    token : str
        Bearer credential. Requests are anonymous when empty.
    api_url : str
        Base URL of the REST API.
    raw_url : str
        Base URL serving repository files at a ref.
    http : httpx.Client | None
        Pre-built client (tests pass one with a mock transport).
    """

    def __init__(
        self,
        token: str = "",
        api_url: str = DEFAULT_API_URL,
        raw_url: str = DEFAULT_RAW_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout, follow_redirects=True)

        self._headers = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_config(cls, config: SyncConfig) -> "GitHubClient":
        return cls(
            token=config.token,
            api_url=config.api_url,
            raw_url=config.raw_url,
            timeout=config.timeout,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def get(self, url: str) -> httpx.Response:
        """GET ``url`` and return the response if its status is 2xx.

        Raises:
            FetchError: On a non-2xx status (with status and body excerpt)
                or a network-level failure (``status_code`` is ``None``).
        """
        logger.debug(f"GET {url}")
        try:
            response = self._http.get(url, headers=self._headers)
        except httpx.TransportError as e:
            raise FetchError(f"GET {url}: {e}", url=url) from e

        if not response.is_success:
            body = response.text[:BODY_EXCERPT_CHARS]
            raise FetchError(
                f"GET {url}: {response.status_code}: {body}",
                url=url,
                status_code=response.status_code,
                body=body,
            )
        return response
