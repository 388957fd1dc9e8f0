"""Remote fetch layer: GitHub client, response cache and rate limiter."""

from .auth import CredentialNotFoundError, CredentialResolver, bearer_headers
from .cache import ResponseCache
from .github import GitHubClient, PaginatedResponse, parse_next_link
from .ratelimit import TokenBucket

__all__ = [
    "CredentialNotFoundError",
    "CredentialResolver",
    "bearer_headers",
    "ResponseCache",
    "GitHubClient",
    "PaginatedResponse",
    "parse_next_link",
    "TokenBucket",
]
