from typing import Any, Optional


class IntegrationError(RuntimeError):
    """Raised when an internal integration is misconfigured or unavailable."""


class UpstreamAPIError(RuntimeError):
    """Raised when an upstream provider call fails unexpectedly."""

    def __init__(self, message: str, response_body: Optional[Any] = None):
        super().__init__(message)
        self.response_body = response_body


class UpstreamUnavailable(UpstreamAPIError):
    """Network failure or timeout while calling an upstream endpoint."""


class UpstreamNotFound(UpstreamAPIError):
    """Upstream answered with a non-success status code."""

    def __init__(self, status_code: int, response_body: Optional[Any] = None):
        super().__init__(f"Request failed with status code {status_code}", response_body)
        self.status_code = status_code


class KeyNotFoundInLegacy(UpstreamAPIError):
    """The legacy release map has no entry for the requested version."""

    def __init__(self, version: str):
        super().__init__(f"Version {version} not found in legacy release list")
        self.version = version
