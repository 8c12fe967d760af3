"""Application entrypoint."""

from __future__ import annotations

import uvicorn

from microdeploy.config import get_settings
from microdeploy.infrastructure.observability.logging import setup_logging
from microdeploy.infrastructure.observability.tracing import setup_tracing


def main() -> None:
    """Run the application."""
    settings = get_settings()
    setup_logging(settings.observability.log_level)
    setup_tracing(settings.observability)

    uvicorn.run(
        "microdeploy.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.debug,
        log_level=settings.observability.log_level.lower(),
    )


if __name__ == "__main__":
    main()
