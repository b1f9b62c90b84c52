"""
Version proxy

Forwards version lookups to get.typo3.org. Release lookups (major+minor) run
a two step chain: the release endpoint first, the legacy bulk release list
only if that fails.
"""

import logging
from typing import Any

from upgrade_proxy.integrations.errors import KeyNotFoundInLegacy, UpstreamAPIError
from upgrade_proxy.integrations.typo3_client import Typo3Client
from upgrade_proxy.models.version import ErrorEnvelope, VersionQuery

logger = logging.getLogger(__name__)


class VersionLookupError(Exception):
    """Both lookup paths failed; carries the envelope returned to the caller."""

    def __init__(self, envelope: ErrorEnvelope):
        super().__init__(envelope.details)
        self.envelope = envelope


class VersionProxy:
    def __init__(self, client: Typo3Client):
        self.client = client

    def lookup(self, query: VersionQuery) -> Any:
        if query.minor is None:
            return self.lookup_major(query.major)
        return self.lookup_release(query.major, query.minor)

    def lookup_major(self, version: str) -> Any:
        logger.info(f"Fetching TYPO3 version {version}...")
        try:
            data = self.client.get_major(version)
        except UpstreamAPIError as e:
            logger.error(f"Error fetching TYPO3 version {version}: {e}")
            if e.response_body is not None:
                logger.error(f"Error response: {e.response_body}")
            raise VersionLookupError(ErrorEnvelope(
                error=f"Failed to fetch TYPO3 version {version}",
                details=str(e),
                response=e.response_body,
            )) from e
        logger.info(f"Got response for version {version}")
        return data

    def lookup_release(self, major: str, minor: str) -> Any:
        version = f"{major}.{minor}"
        logger.info(f"Fetching TYPO3 version {version}...")

        try:
            data = self.client.get_release(major, minor)
        except UpstreamAPIError as primary_error:
            logger.info(f"Release endpoint failed, trying legacy endpoint: {primary_error}")
            try:
                data = self.client.get_legacy_release(major, minor)
            except KeyNotFoundInLegacy as e:
                # legacy list answered but lacks the version: report the primary failure
                logger.warning(f"{e}; reporting release endpoint error")
                raise self._release_error(version, primary_error) from primary_error
            except UpstreamAPIError as legacy_error:
                logger.error(f"Legacy API endpoint also failed: {legacy_error}")
                raise self._release_error(version, legacy_error) from legacy_error
            logger.info("Got response from legacy API endpoint")
            return data

        logger.info(f"Got response for version {version} from release endpoint")
        return data

    def _release_error(self, version: str, error: UpstreamAPIError) -> VersionLookupError:
        logger.error(f"Error fetching TYPO3 version {version}: {error}")
        if error.response_body is not None:
            logger.error(f"Error response: {error.response_body}")
        return VersionLookupError(ErrorEnvelope(
            error="Failed to fetch TYPO3 version information",
            details=str(error),
            response=error.response_body,
            version=version,
        ))
