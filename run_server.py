#!/usr/bin/env python3
"""Run the Memory Match Web API server."""

import uvicorn

from core.settings import Settings


def main():
    """Run the server with host, port and reload taken from settings."""
    settings = Settings()

    uvicorn.run(
        "web.api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
