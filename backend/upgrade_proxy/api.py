from typing import Iterator
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from upgrade_proxy.config import UpstreamConfig
from upgrade_proxy.integrations.typo3_client import build_typo3_client
from upgrade_proxy.models.version import VersionQuery
from upgrade_proxy.proxy import VersionLookupError, VersionProxy
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)

SERVICE_NAME = "TYPO3 Upgrade Proxy"
SERVICE_VERSION = "1.0.0"

app = FastAPI(
    title=SERVICE_NAME,
    description="Version metadata proxy for the TYPO3 upgrade path planner",
    version=SERVICE_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_upstream_config() -> UpstreamConfig:
    return UpstreamConfig()


def get_version_proxy(config: UpstreamConfig = Depends(get_upstream_config)) -> Iterator[VersionProxy]:
    # one session per request: no cookies or connections shared between lookups
    client = build_typo3_client(config)
    try:
        yield VersionProxy(client)
    finally:
        client.close()


def _error_response(error: VersionLookupError) -> JSONResponse:
    return JSONResponse(status_code=500, content=error.envelope.to_content())


@app.get("/")
def root():
    return {
        "message": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "health": "/health",
            "major_version": "/api/typo3/{version}",
            "release": "/api/typo3/{major}/{minor}",
            "docs": "/docs"
        }
    }


@app.get("/health")
def health():
    return {"status": "healthy", "service": SERVICE_NAME}


@app.get("/api/typo3/{version}")
def get_major_version(version: str, proxy: VersionProxy = Depends(get_version_proxy)):
    """
    Proxy the upstream major/{version} record unchanged.
    """
    try:
        return proxy.lookup(VersionQuery(major=version))
    except VersionLookupError as e:
        return _error_response(e)


@app.get("/api/typo3/{major}/{minor}")
def get_release(major: str, minor: str, proxy: VersionProxy = Depends(get_version_proxy)):
    """
    Fetch a specific release.

    - **major**: Major version (e.g. 12)
    - **minor**: Minor version (e.g. 4)

    Falls back to the legacy release list when the release endpoint fails.
    """
    try:
        return proxy.lookup(VersionQuery(major=major, minor=minor))
    except VersionLookupError as e:
        return _error_response(e)
