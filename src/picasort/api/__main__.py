"""
picasort.api.__main__

Run the service with `python -m picasort.api` (or `picasort-api`).
"""

from __future__ import annotations

import uvicorn

from picasort.api.app import create_app
from picasort.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # Logging is configured by create_app (structlog); keep uvicorn's dictConfig out.
        log_config=None,
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Run `picasort-bootstrap` first; the API does not create its role or database.
