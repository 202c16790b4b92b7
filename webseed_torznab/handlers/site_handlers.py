# webseed_torznab/handlers/site_handlers.py

import os

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, HTMLResponse

from ..config import TORRENT_MIME_TYPE, ServerConfig, logger
from ..services.catalog import Catalog, is_torrent_filename
from ..ui.views import render_index_page
from .dependencies import get_catalog, get_config

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index_page(
    catalog: Catalog = Depends(get_catalog),
    config: ServerConfig = Depends(get_config),
) -> str:
    return render_index_page(config, len(catalog), catalog.total_size)


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/torrent/{filename}")
async def download_torrent(
    filename: str, catalog: Catalog = Depends(get_catalog)
) -> FileResponse:
    """
    Serves the original ``.torrent`` file. Only files that are part of the
    catalog are served, so arbitrary paths in the directory stay private.
    """
    if not is_torrent_filename(filename):
        raise HTTPException(status_code=400, detail="Invalid file type")

    record = catalog.find_by_filename(filename)
    if record is None or not os.path.isfile(record.source_path):
        raise HTTPException(status_code=404, detail="Torrent file not found")

    logger.info(f"Serving torrent file {record.display_path}")
    return FileResponse(
        record.source_path, media_type=TORRENT_MIME_TYPE, filename=filename
    )
