# webseed_torznab/handlers/dependencies.py

from fastapi import Request

from ..config import ServerConfig
from ..services.catalog import Catalog


def get_catalog(request: Request) -> Catalog:
    """Returns the catalog shared by every request of the application."""
    return request.app.state.catalog


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config
