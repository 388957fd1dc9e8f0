"""GitHub REST client with caching and a client-side rate limit.

Only the operations needed for module discovery, README retrieval, archive
download and two-ref comparison are implemented.
"""

from __future__ import annotations

import base64
import binascii
import json
import tempfile
from dataclasses import dataclass
from typing import IO, Any, Callable
from urllib.parse import quote

import httpx
from loguru import logger

from ..core.config import GitHubConfig
from ..core.exceptions import ContentUnavailableError, FetchError, RateLimitExceededError
from ..core.types import CompareFile, CompareResult, Repository
from .auth import CredentialResolver, bearer_headers
from .cache import ResponseCache
from .ratelimit import TokenBucket

# Archive statuses that mean "nothing to download" rather than a failure
UNAVAILABLE_ARCHIVE_STATUSES = frozenset({403, 404, 409})

# Archives larger than this spill from memory to a temporary file
ARCHIVE_SPOOL_BYTES = 16 * 1024 * 1024


@dataclass(frozen=True)
class PaginatedResponse:
    """A page body and the URL of the next page, if any."""

    data: bytes
    next_url: str | None


def parse_next_link(link_header: str | None) -> str | None:
    """Extract the ``rel="next"`` URL from an RFC 5988 Link header.

    Args:
        link_header: Raw Link header value.

    Returns:
        URL of the next page, or None.
    """
    if not link_header:
        return None

    for part in link_header.split(","):
        sections = part.strip().split(";")
        if len(sections) < 2:
            continue

        url = sections[0].strip(" <>")
        rel = None
        for section in sections[1:]:
            section = section.strip()
            if section.startswith("rel="):
                rel = section[len("rel="):].strip('"')

        if rel == "next":
            return url

    return None


class GitHubClient:
    """Authenticated, cached, rate-limited access to the GitHub REST API.

    Successful JSON/text responses are cached for ``cache_ttl`` seconds.
    Archives are streamed and never cached.

    Example:
        with GitHubClient(GitHubConfig(org="cloudnationhq")) as client:
            repos = client.list_org_repositories("cloudnationhq")
            archive = client.get_archive(client.archive_url(repos[0].full_name))
    """

    def __init__(
        self,
        config: GitHubConfig,
        resolver: CredentialResolver | None = None,
        clock: Callable[[], float] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            config: Remote host configuration.
            resolver: Credential resolver for the token reference.
            clock: Monotonic time source shared by cache and rate limiter.
            transport: Optional httpx transport (tests).
        """
        self._config = config
        auth_headers = bearer_headers(config.token, resolver)
        self._authenticated = bool(auth_headers)

        capacity = (
            config.authenticated_rate_limit if self._authenticated else config.anonymous_rate_limit
        )
        timing = {"clock": clock} if clock is not None else {}
        self._rate_limit = TokenBucket(capacity, window=config.rate_limit_window, **timing)
        self._cache = ResponseCache(ttl=config.cache_ttl, **timing)

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
        }
        headers.update(auth_headers)
        client_kwargs: dict[str, Any] = {
            "timeout": config.timeout,
            "follow_redirects": True,
            "headers": headers,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    @property
    def api_url(self) -> str:
        return self._config.api_url.rstrip("/")

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    @property
    def rate_limit(self) -> TokenBucket:
        return self._rate_limit

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def clear_cache(self) -> None:
        """Invalidate every cached response."""
        self._cache.clear()

    # -------------------------------------------------------------------------
    # Raw operations
    # -------------------------------------------------------------------------

    def get(self, url: str) -> bytes:
        """GET a URL, serving from cache when a live entry exists.

        Raises:
            RateLimitExceededError: If no rate-limit token is available.
            FetchError: On network failure or non-200 status.
        """
        cached = self._cache.get(url)
        if isinstance(cached, bytes):
            logger.debug(f"Cache hit: {url}")
            return cached

        response = self._request(url)
        data = response.content
        self._cache.set(url, data)
        return data

    def get_paginated(self, url: str) -> PaginatedResponse:
        """GET one page of a listing endpoint.

        Returns:
            The page body and the next page URL parsed from the Link header.
        """
        cached = self._cache.get(url)
        if isinstance(cached, PaginatedResponse):
            logger.debug(f"Cache hit: {url}")
            return cached

        response = self._request(url)
        page = PaginatedResponse(
            data=response.content,
            next_url=parse_next_link(response.headers.get("Link")),
        )
        self._cache.set(url, page)
        return page

    def get_archive(self, url: str) -> IO[bytes]:
        """Stream a compressed archive into a temporary file.

        The caller owns (and must close) the returned file object, which is
        positioned at the start.

        Raises:
            ContentUnavailableError: On 404/403/409 (disabled downloads,
                empty repository).
            FetchError: On any other failure.
        """
        self._acquire(url)

        spool = tempfile.SpooledTemporaryFile(max_size=ARCHIVE_SPOOL_BYTES)
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code in UNAVAILABLE_ARCHIVE_STATUSES:
                    raise ContentUnavailableError(url, response.status_code)
                if response.status_code != 200:
                    raise FetchError(
                        url, f"GitHub API error: {response.status_code}", response.status_code
                    )
                for chunk in response.iter_bytes():
                    spool.write(chunk)
        except httpx.TimeoutException as e:
            spool.close()
            raise FetchError(url, "request timed out") from e
        except httpx.HTTPError as e:
            spool.close()
            raise FetchError(url, str(e)) from e
        except FetchError:
            spool.close()
            raise

        spool.seek(0)
        return spool

    def _acquire(self, url: str) -> None:
        if not self._rate_limit.acquire():
            logger.warning(f"Rate limit exhausted, refusing request: {url}")
            raise RateLimitExceededError(url)

    def _request(self, url: str) -> httpx.Response:
        self._acquire(url)

        try:
            response = self._client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(url, "request timed out") from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e)) from e

        if response.status_code != 200:
            raise FetchError(
                url, f"GitHub API error: {response.status_code}", response.status_code
            )
        return response

    # -------------------------------------------------------------------------
    # API helpers
    # -------------------------------------------------------------------------

    def repos_url(self, org: str) -> str:
        return f"{self.api_url}/orgs/{quote(org)}/repos?per_page=100"

    def archive_url(self, full_name: str) -> str:
        return f"{self.api_url}/repos/{full_name}/tarball"

    def list_org_repositories(self, org: str) -> list[Repository]:
        """List every repository of an organization, following pagination."""
        repositories: list[Repository] = []
        url: str | None = self.repos_url(org)

        while url:
            page = self.get_paginated(url)
            try:
                payload = json.loads(page.data)
            except json.JSONDecodeError as e:
                raise FetchError(url, f"invalid JSON: {e}") from e
            repositories.extend(Repository.from_api(item) for item in payload)
            url = page.next_url

        logger.debug(f"Listed repositories: org={org!r}, count={len(repositories)}")
        return repositories

    def fetch_readme(self, full_name: str) -> str:
        """Fetch the README text of a repository."""
        url = f"{self.api_url}/repos/{full_name}/readme"
        data = self.get(url)
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise FetchError(url, f"invalid JSON: {e}") from e
        return self.fetch_file_content(payload)

    def fetch_file_content(self, payload: dict[str, Any]) -> str:
        """Resolve a contents-API payload to text.

        Prefers the direct download URL and falls back to the inline base64
        payload.
        """
        download_url = payload.get("download_url")
        if download_url:
            return self.get(download_url).decode("utf-8", errors="replace")

        encoded = payload.get("content")
        if encoded:
            try:
                return base64.b64decode(encoded.replace("\n", "")).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError) as e:
                raise FetchError(payload.get("path", "<content>"), f"invalid base64: {e}") from e

        raise FetchError(payload.get("path", "<content>"), "no content available")

    def compare(self, full_name: str, base: str, head: str) -> CompareResult:
        """Compare two refs of a repository."""
        url = (
            f"{self.api_url}/repos/{full_name}/compare/"
            f"{quote(base, safe='')}...{quote(head, safe='')}"
        )
        data = self.get(url)
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise FetchError(url, f"invalid JSON: {e}") from e

        files = [
            CompareFile(
                filename=item.get("filename") or "",
                patch=item.get("patch") or "",
                status=item.get("status") or "",
            )
            for item in payload.get("files") or []
        ]
        commits = payload.get("commits") or []
        return CompareResult(
            files=files,
            html_url=payload.get("html_url") or "",
            base_commit_sha=(payload.get("base_commit") or {}).get("sha") or "",
            head_commit_sha=(commits[-1].get("sha") or "") if commits else "",
        )
