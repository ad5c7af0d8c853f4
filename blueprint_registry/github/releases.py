"""Release lookup: fetch a release's asset list by tag."""

from __future__ import annotations

import logging

from blueprint_registry.errors import FetchError
from blueprint_registry.github.client import GitHubClient
from blueprint_registry.registry.models import Release, ReleaseAsset

logger = logging.getLogger(__name__)


class ReleaseFetcher:
    """Retrieves a release and its assets for a repository and tag."""

    def __init__(self, client: GitHubClient):
        self.client = client

    def release_url(self, repository: str, tag: str) -> str:
        return f"{self.client.api_url}/repos/{repository}/releases/tags/{tag}"

    def fetch_release(self, repository: str, tag: str) -> Release:
        """Fetch the release tagged ``tag`` in ``repository`` (``owner/name``).

        Assets keep the order the API returned them in. There are no retries:
        any failure is fatal to the run.

        Raises:
            ValueError: If either input is empty.
            FetchError: If the lookup fails or the payload is not a release.
        """
        if not repository or not tag:
            raise ValueError("repository and tag are required")

        url = self.release_url(repository, tag)
        response = self.client.get(url)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                f"GET {url}: malformed release payload: {e}",
                url=url,
                status_code=response.status_code,
                body=response.text[:200],
            ) from e

        release = _parse_release(data, url, response.status_code)
        logger.info(f"Release {release.tag_name} of {repository} has {len(release.assets)} assets")
        return release


def _parse_release(data: object, url: str, status_code: int) -> Release:
    def malformed(reason: str) -> FetchError:
        return FetchError(
            f"GET {url}: malformed release payload: {reason}",
            url=url,
            status_code=status_code,
        )

    if not isinstance(data, dict):
        raise malformed("expected a JSON object")

    # A null asset list is an empty release
    items = data.get("assets")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise malformed("'assets' must be a list")

    assets = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name") or ""
        download_url = item.get("browser_download_url") or ""
        if not isinstance(name, str) or not isinstance(download_url, str):
            raise malformed("asset name and browser_download_url must be strings")
        assets.append(ReleaseAsset(name=name, download_url=download_url))

    tag_name = data.get("tag_name") or ""
    if not isinstance(tag_name, str):
        raise malformed("'tag_name' must be a string")
    return Release(tag_name=tag_name, assets=assets)
