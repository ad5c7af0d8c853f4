"""Tests for the GitHub client, release lookup, and manifest resolution."""

import logging

import httpx
import pytest

from blueprint_registry.errors import FetchError
from blueprint_registry.github.client import GitHubClient
from blueprint_registry.github.manifests import ManifestResolver, apply_fallbacks, parse_manifest
from blueprint_registry.github.releases import ReleaseFetcher
from blueprint_registry.registry.models import Manifest, ReleaseAsset

RELEASE_URL = "https://api.github.com/repos/acme/blueprints/releases/tags/v1.2.3"
MANIFEST_URL = "https://raw.githubusercontent.com/acme/blueprints/v1.2.3/blueprints/foo/manifest.yaml"


def _client(routes: dict, requests: list | None = None, token: str = "") -> GitHubClient:
    """Client whose transport answers from ``routes`` (url -> (status, body) or exception).

    Unknown URLs get a 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        outcome = routes.get(str(request.url), (404, "404: Not Found"))
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    return GitHubClient(token=token, http=httpx.Client(transport=httpx.MockTransport(handler)))


# --- Client ---


def test_client_sends_github_headers():
    requests = []
    client = _client({RELEASE_URL: (200, {"tag_name": "v1.2.3", "assets": []})}, requests)

    client.get(RELEASE_URL)

    assert requests[0].headers["Accept"] == "application/vnd.github+json"
    assert "Authorization" not in requests[0].headers


def test_client_sends_bearer_token_when_configured():
    requests = []
    client = _client({RELEASE_URL: (200, {})}, requests, token="s3cret")

    client.get(RELEASE_URL)

    assert requests[0].headers["Authorization"] == "Bearer s3cret"


def test_client_error_status_carries_status_and_body_excerpt():
    client = _client({RELEASE_URL: (500, "x" * 2000)})

    with pytest.raises(FetchError) as exc_info:
        client.get(RELEASE_URL)

    err = exc_info.value
    assert err.status_code == 500
    assert err.body == "x" * 500
    assert err.url == RELEASE_URL
    assert not err.is_transport


def test_client_transport_failure_has_no_status():
    client = _client({RELEASE_URL: httpx.ConnectError("connection refused")})

    with pytest.raises(FetchError) as exc_info:
        client.get(RELEASE_URL)

    assert exc_info.value.status_code is None
    assert exc_info.value.is_transport


def test_client_strips_trailing_slash_from_base_urls():
    client = GitHubClient(api_url="https://ghe.example.com/api/v3/", raw_url="https://raw.example.com/")
    try:
        assert client.api_url == "https://ghe.example.com/api/v3"
        assert client.raw_url == "https://raw.example.com"
    finally:
        client.close()


# --- Release lookup ---


def test_fetch_release_preserves_asset_order():
    payload = {
        "tag_name": "v1.2.3",
        "assets": [
            {"name": "beta.zip", "browser_download_url": "U2"},
            {"name": "alpha.zip", "browser_download_url": "U1"},
            {"name": "checksums.txt", "browser_download_url": "U3"},
        ],
    }
    release = ReleaseFetcher(_client({RELEASE_URL: (200, payload)})).fetch_release(
        "acme/blueprints", "v1.2.3"
    )

    assert release.tag_name == "v1.2.3"
    assert release.assets == [
        ReleaseAsset("beta.zip", "U2"),
        ReleaseAsset("alpha.zip", "U1"),
        ReleaseAsset("checksums.txt", "U3"),
    ]


def test_fetch_release_tolerates_missing_asset_fields():
    payload = {"tag_name": "v1.2.3", "assets": [{"name": "alpha.zip"}, "junk"]}
    release = ReleaseFetcher(_client({RELEASE_URL: (200, payload)})).fetch_release(
        "acme/blueprints", "v1.2.3"
    )
    assert release.assets == [ReleaseAsset("alpha.zip", "")]


def test_fetch_release_null_assets_is_empty():
    payload = {"tag_name": "v1.2.3", "assets": None}
    release = ReleaseFetcher(_client({RELEASE_URL: (200, payload)})).fetch_release(
        "acme/blueprints", "v1.2.3"
    )
    assert release.assets == []


def test_fetch_release_not_found():
    fetcher = ReleaseFetcher(_client({}))
    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch_release("acme/blueprints", "v1.2.3")
    assert exc_info.value.status_code == 404


def test_fetch_release_malformed_payload():
    bad_bodies = (
        "not json",
        [1, 2],
        {"assets": "nope"},
        {"tag_name": "v1.2.3", "assets": [{"name": 7, "browser_download_url": "U1"}]},
        {"tag_name": "v1.2.3", "assets": [{"name": "a.zip", "browser_download_url": ["U1"]}]},
    )
    for body in bad_bodies:
        fetcher = ReleaseFetcher(_client({RELEASE_URL: (200, body)}))
        with pytest.raises(FetchError, match="malformed release payload"):
            fetcher.fetch_release("acme/blueprints", "v1.2.3")


def test_fetch_release_requires_inputs():
    fetcher = ReleaseFetcher(_client({}))
    with pytest.raises(ValueError):
        fetcher.fetch_release("", "v1.2.3")
    with pytest.raises(ValueError):
        fetcher.fetch_release("acme/blueprints", "")


# --- Manifest resolution ---


def test_manifest_path_is_deterministic():
    resolver = ManifestResolver(_client({}))
    assert resolver.manifest_path("foo") == "blueprints/foo/manifest.yaml"
    assert resolver.manifest_url("acme/blueprints", "v1.2.3", "foo") == MANIFEST_URL


def test_blueprint_path_is_normalized():
    resolver = ManifestResolver(_client({}))
    assert resolver.blueprint_path("../x") == "x"
    assert resolver.blueprint_path("./a//b") == "blueprints/a/b"
    assert resolver.manifest_path("a/../b") == "blueprints/b/manifest.yaml"


def test_resolve_manifest_parses_yaml():
    doc = "name: Foo\nversion: 2.0.0\ndescription: The foo blueprint\ntags: [web, go]\nextra: ignored\n"
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, doc)}))

    manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")

    assert manifest == Manifest(
        name="Foo", version="2.0.0", description="The foo blueprint", tags=["web", "go"]
    )


def test_resolve_manifest_partial_document():
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, "description: only this\n")}))
    manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")
    assert manifest == Manifest(description="only this")


def test_resolve_manifest_keeps_scalars_as_written():
    doc = "name: 010\nversion: 1.10\ndescription: yes\ntags: [2.0, on, ~]\n"
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, doc)}))

    manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")

    assert manifest == Manifest(name="010", version="1.10", description="yes", tags=["2.0", "on"])


def test_resolve_manifest_null_fields_are_empty():
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, "name: ~\nversion: null\n")}))
    manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")
    assert manifest == Manifest()


def test_resolve_manifest_missing_is_empty(caplog):
    resolver = ManifestResolver(_client({}))
    with caplog.at_level(logging.DEBUG, logger="blueprint_registry"):
        manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")

    assert manifest == Manifest()
    assert "No manifest for foo" in caplog.text
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_resolve_manifest_malformed_yaml_is_empty_and_warns(caplog):
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, "name: [unclosed\n")}))
    with caplog.at_level(logging.DEBUG, logger="blueprint_registry"):
        manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")

    assert manifest == Manifest()
    assert "Malformed manifest for foo" in caplog.text


def test_resolve_manifest_non_mapping_is_empty(caplog):
    resolver = ManifestResolver(_client({MANIFEST_URL: (200, "- just\n- a list\n")}))
    with caplog.at_level(logging.WARNING, logger="blueprint_registry"):
        manifest = resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo")

    assert manifest == Manifest()
    assert "expected a mapping" in caplog.text


def test_resolve_manifest_fetch_failures_are_suppressed():
    for outcome in ((500, "boom"), (403, "rate limited"), httpx.ReadTimeout("slow")):
        resolver = ManifestResolver(_client({MANIFEST_URL: outcome}))
        assert resolver.resolve_manifest("acme/blueprints", "v1.2.3", "foo") == Manifest()


def test_parse_manifest_coerces_values():
    manifest = parse_manifest({"name": "foo", "version": 2, "tags": "solo"})
    assert manifest.version == "2"
    assert manifest.tags == ["solo"]

    assert parse_manifest({"tags": {"not": "a list"}}).tags == []
    assert parse_manifest({"name": None}).name == ""


# --- Fallbacks ---


def test_fallbacks_for_empty_manifest():
    derived = apply_fallbacks(Manifest(), "v1.2.3", "foo")
    assert derived == Manifest(
        name="foo", version="1.2.3", description="foo blueprint", tags=[]
    )


def test_fallbacks_only_fill_empty_fields():
    manifest = Manifest(name="Foo", version="", description="Custom", tags=["x"])
    derived = apply_fallbacks(manifest, "v1.2.3", "foo")
    assert derived == Manifest(name="Foo", version="1.2.3", description="Custom", tags=["x"])


def test_fallback_version_without_prefix():
    assert apply_fallbacks(Manifest(), "1.2.3", "foo").version == "1.2.3"
    assert apply_fallbacks(Manifest(), "vv2", "foo").version == "v2"
