# webseed_torznab/handlers/api_handlers.py

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..config import logger
from ..services.catalog import Catalog
from ..services.torrent_parser import UnreadableSource
from .dependencies import get_catalog

router = APIRouter(prefix="/api")


@router.get("/torrents")
async def list_torrents(
    q: str = "", catalog: Catalog = Depends(get_catalog)
) -> dict[str, Any]:
    """Lists every torrent, or those whose name contains ``q``."""
    records = catalog.search(q)
    return {
        "status": "success",
        "count": len(records),
        "torrents": [record.to_dict() for record in records],
    }


@router.get("/torrents/{info_hash}")
async def get_torrent(
    info_hash: str, catalog: Catalog = Depends(get_catalog)
) -> dict[str, Any]:
    record = catalog.find_by_info_hash(info_hash)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Torrent '{info_hash}' not found")
    return record.to_dict()


@router.post("/refresh", response_model=None)
async def refresh_torrents(
    catalog: Catalog = Depends(get_catalog),
) -> dict[str, Any] | JSONResponse:
    """
    Rescans the torrents directory. The previous records stay visible to
    other requests until the new set is complete.
    """
    try:
        count = await catalog.refresh()
    except UnreadableSource as e:
        logger.error(f"[API] Refresh failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": f"Error refreshing torrents: {e}"},
        )

    return {
        "status": "success",
        "message": "Torrents refreshed successfully",
        "count": count,
    }
