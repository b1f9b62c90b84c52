#!/usr/bin/env python3
"""
FastAPI server runner for the TYPO3 upgrade proxy
"""

import uvicorn
from upgrade_proxy.config import ServerConfig

if __name__ == "__main__":
    config = ServerConfig.from_env()
    uvicorn.run(
        "upgrade_proxy.api:app",
        host=config.host,
        port=config.port,
        reload=True,  # Enable auto-reload for development
        log_level="info"
    )
