from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from upgrade_proxy.api import app, get_version_proxy
from upgrade_proxy.integrations.typo3_client import Typo3Client
from upgrade_proxy.proxy import VersionProxy

MAJOR_12 = {
    "version": 12,
    "title": "TYPO3 12",
    "release_date": "2022-10-04T00:00:00+02:00",
    "maintained_until": "2026-04-30T00:00:00+02:00",
    "elts_until": "2029-04-30T00:00:00+02:00",
    "lts": 12.4,
    "requirements": [
        {"category": "php", "name": "php", "min": "8.1.0", "max": "8.4.99"},
        {"category": "database", "name": "mysql", "min": "8.0.17", "max": "8.3.99"},
    ],
}

RELEASE_12_4 = {
    "version": "12.4.0",
    "date": "2023-04-25T12:00:00+02:00",
    "type": "regular",
    "elts": False,
}

LEGACY_RELEASES = {
    "12.4": {"version": "12.4", "releases": {"12.4.0": {"date": "2023-04-25"}}},
    "13.9": {"version": "13.9", "releases": {"13.9.0": {"date": "2025-10-01"}}},
}


@pytest.fixture
def typo3_client():
    return MagicMock(spec=Typo3Client)


@pytest.fixture
def proxy(typo3_client):
    return VersionProxy(typo3_client)


@pytest.fixture
def api_client(proxy):
    app.dependency_overrides[get_version_proxy] = lambda: proxy
    yield TestClient(app)
    app.dependency_overrides.clear()
