"""
Runtime configuration for the upgrade proxy.

Upstream settings are fixed defaults wrapped in a config object so the
client can be built against a different base URL or timeout in tests.
Only the listening port is read from the environment.
"""

import os
from typing import Dict

from dotenv import load_dotenv
from pydantic import BaseModel

from upgrade_proxy.integrations.errors import IntegrationError

load_dotenv()

TYPO3_API_BASE_URL = "https://get.typo3.org/api/v1/"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "TYPO3-Upgrade-Tool"
DEFAULT_PORT = 3000


class UpstreamConfig(BaseModel):
    base_url: str = TYPO3_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = "application/json"

    @property
    def headers(self) -> Dict[str, str]:
        return {"Accept": self.accept, "User-Agent": self.user_agent}

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls) -> "ServerConfig":
        port = os.getenv("PORT")
        if not port:
            return cls()
        if not port.isdigit():
            raise IntegrationError(f"PORT must be a number, got {port!r}")
        return cls(port=int(port))
