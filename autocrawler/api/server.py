import logging
from typing import Optional

from fastapi import FastAPI

from autocrawler import __version__
from autocrawler.api.routers import create_crawler_router, create_systems_router
from autocrawler.container import SECRET_KEYS, Container

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the control API around the container's traversal engine."""
    container = container or Container()
    app = FastAPI(
        title="AutoCrawler API",
        description="Start, stop and export best-effort text crawls.",
        version=__version__,
    )
    app.state.container = container

    engine = container.traversal_engine()
    app.include_router(create_crawler_router(engine))
    app.include_router(create_systems_router(container.config(), secret_keys=SECRET_KEYS))
    logger.debug("Control API created")
    return app
