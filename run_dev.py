#!/usr/bin/env python3
"""Run the upload gateway with auto-reload, using host and port from Settings."""

import uvicorn

from app.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=True,
    )


if __name__ == "__main__":
    main()
