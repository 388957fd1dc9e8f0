"""Custom exceptions for tfindex."""


class TfIndexError(Exception):
    """Base exception for all tfindex errors."""

    pass


class DatabaseError(TfIndexError):
    """Database operation failed."""

    pass


class InvalidInputError(TfIndexError):
    """Caller supplied an empty or unparsable identifier."""

    pass


# =============================================================================
# Remote fetch
# =============================================================================


class FetchError(TfIndexError):
    """Request to the remote host failed.

    Attributes:
        url: URL that was requested.
        status_code: HTTP status, if a response was received.
    """

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class RateLimitExceededError(FetchError):
    """No rate-limit token was available for the request."""

    def __init__(self, url: str):
        super().__init__(url, "rate limit exceeded")


class ContentUnavailableError(FetchError):
    """Repository archive cannot be retrieved (disabled downloads, empty repo)."""

    def __init__(self, url: str, status_code: int):
        super().__init__(url, f"repository content unavailable (status {status_code})", status_code)


# =============================================================================
# Parsing
# =============================================================================


class HCLParseError(TfIndexError):
    """A configuration file could not be parsed."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to parse {filename}: {reason}")


# =============================================================================
# Lookups
# =============================================================================


class NotFoundError(TfIndexError):
    """Requested record is not present in the index."""

    pass


class ModuleNotIndexedError(NotFoundError):
    """Module does not exist in the index."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Module '{name}' not found. Run a sync first.")


class ReleaseNotFoundError(NotFoundError):
    """No release metadata is stored for the module/version."""

    def __init__(self, module_name: str, version: str | None = None):
        self.module_name = module_name
        self.version = version
        if version:
            message = f"No release metadata found for {module_name} {version}"
        else:
            message = f"No release metadata available for {module_name}. Run a sync first."
        super().__init__(message)


class ChangelogNotFoundError(NotFoundError):
    """Module has no CHANGELOG.md in the local index."""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(
            f"CHANGELOG.md not found for {module_name} in local index; run a full sync first"
        )


class SyncError(TfIndexError):
    """A sync pass could not start (e.g. repository discovery failed)."""

    pass
