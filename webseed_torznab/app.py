# webseed_torznab/app.py

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import ServerConfig, logger
from .handlers import api_handlers, site_handlers, torznab_handlers
from .handlers.error_handler import global_error_handler, http_error_handler
from .services.catalog import Catalog
from .services.torrent_parser import UnreadableSource


def register_handlers(app: FastAPI) -> None:
    """
    Registers all the routers and exception handlers for the service.
    This keeps create_app clean and focused on initialization.
    """
    app.include_router(site_handlers.router)
    app.include_router(api_handlers.router)
    app.include_router(torznab_handlers.router)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_error_handler)

    logger.info("All handlers have been registered.")


def create_app(
    config: ServerConfig,
    catalog: Optional[Catalog] = None,
    load_on_startup: bool = True,
) -> FastAPI:
    """
    Builds the FastAPI application. The catalog and configuration are kept on
    ``app.state`` so every handler reads the same instances.
    """
    catalog = catalog if catalog is not None else Catalog(config.torrents_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if load_on_startup:
            logger.info("--- Loading torrents ---")
            try:
                await catalog.refresh()
            except UnreadableSource as e:
                # The directory may appear later; /api/refresh can retry.
                logger.error(f"Error loading torrents: {e}. Starting with an empty catalog.")

        logger.info(f"Serving torrents from: {catalog.directory}")
        logger.info(f"Base URL: {config.base_url}")
        logger.info("API endpoints:")
        logger.info(f"  JSON API: {config.base_url}/api/torrents")
        logger.info(f"  Torznab API: {config.base_url}/api/torznab")
        logger.info(f"  Torznab Caps: {config.base_url}/api/torznab?t=caps")
        yield
        logger.info("--- Shutdown complete ---")

    app = FastAPI(title=config.title, version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.catalog = catalog

    register_handlers(app)
    return app
