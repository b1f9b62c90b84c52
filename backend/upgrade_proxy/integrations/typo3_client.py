"""
get.typo3.org API client

Thin wrapper around a requests Session that applies the configured base URL,
headers and timeout, and maps transport and status failures onto the
integration error types.

The configured timeout is a deadline for the whole call (connect, headers
and body). requests only bounds each socket operation, so the body is read
in a worker thread and the caller stops waiting once the deadline passes.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Any, Optional, Tuple

import requests

from upgrade_proxy.config import UpstreamConfig
from upgrade_proxy.integrations.errors import (
    KeyNotFoundInLegacy,
    UpstreamAPIError,
    UpstreamNotFound,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

LEGACY_RELEASES_PATH = "json/releases/ter/full"
CHUNK_SIZE = 64 * 1024


def _error_body(content: bytes) -> Any:
    try:
        return json.loads(content)
    except ValueError:
        return content.decode("utf-8", errors="replace") or None


class Typo3Client:
    """Read-only client for the public TYPO3 versioning API"""

    def __init__(self, config: Optional[UpstreamConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or UpstreamConfig()
        self.session = session or requests.Session()
        self.session.headers.update(self.config.headers)

    def _fetch(self, url: str, deadline: float) -> Tuple[bool, int, bytes]:
        response = self.session.get(url, timeout=self.config.timeout_seconds, stream=True)
        try:
            chunks = []
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"deadline passed while reading {url}")
                chunks.append(chunk)
            return response.ok, response.status_code, b"".join(chunks)
        finally:
            response.close()

    def get_json(self, path: str) -> Any:
        url = self.config.url_for(path)
        timeout = self.config.timeout_seconds
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._fetch, url, time.monotonic() + timeout)
        try:
            ok, status_code, content = future.result(timeout=timeout)
        except (FuturesTimeout, requests.Timeout) as e:
            raise UpstreamUnavailable(f"Timeout of {timeout}s exceeded for {url}") from e
        except requests.RequestException as e:
            raise UpstreamUnavailable(f"Request to {url} failed: {e}") from e
        finally:
            # a worker still reading gives up at its own deadline check
            executor.shutdown(wait=False)

        if not ok:
            raise UpstreamNotFound(status_code, _error_body(content))

        try:
            return json.loads(content)
        except ValueError as e:
            raise UpstreamAPIError(f"Invalid JSON returned by {url}", content.decode("utf-8", errors="replace")) from e

    def get_major(self, version: str) -> Any:
        return self.get_json(f"major/{version}")

    def get_release(self, major: str, minor: str) -> Any:
        return self.get_json(f"release/{major}/{minor}")

    def get_legacy_releases(self) -> Any:
        return self.get_json(LEGACY_RELEASES_PATH)

    def get_legacy_release(self, major: str, minor: str) -> Any:
        """
        Look up one version in the legacy bulk release list.

        The legacy endpoint returns every release keyed by "major.minor".
        Raises KeyNotFoundInLegacy if the key is absent or the payload is
        not a mapping.
        """
        version = f"{major}.{minor}"
        releases = self.get_legacy_releases()
        if not isinstance(releases, dict) or version not in releases:
            raise KeyNotFoundInLegacy(version)
        return releases[version]

    def close(self) -> None:
        self.session.close()


def build_typo3_client(config: Optional[UpstreamConfig] = None) -> Typo3Client:
    client = Typo3Client(config)
    logger.debug(f"TYPO3 API client initialized for {client.config.base_url}")
    return client
