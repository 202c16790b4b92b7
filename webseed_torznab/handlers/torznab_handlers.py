# webseed_torznab/handlers/torznab_handlers.py

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..config import ServerConfig, logger
from ..services.catalog import Catalog
from ..services.torrent_data import TorrentRecord
from ..ui.torznab import render_caps, render_error, render_search_feed
from ..utils import torznab_category
from .dependencies import get_catalog, get_config

router = APIRouter()

XML_MEDIA_TYPE = "application/xml"

# Torznab error code for a parameter with an unusable value.
ERROR_INCORRECT_PARAMETER = 201


class InvalidParameter(ValueError):
    """Raised when a Torznab query parameter cannot be interpreted."""

    def __init__(self, name: str, value: str):
        super().__init__(f"Incorrect parameter: {name}={value!r}")
        self.name = name
        self.value = value


def _parse_non_negative(name: str, raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise InvalidParameter(name, raw)
    if value < 0:
        raise InvalidParameter(name, raw)
    return value


def _parse_categories(raw: Optional[str]) -> set[int]:
    """Parses ``cat=5000,5040`` into the top-level category ids requested."""
    if not raw:
        return set()
    categories = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not (part.isascii() and part.isdigit()):
            raise InvalidParameter("cat", raw)
        # Sub-categories (e.g. 5040 TV/HD) are matched by their parent.
        categories.add(int(part) // 1000 * 1000)
    return categories


def select_results(
    records: tuple[TorrentRecord, ...],
    config: ServerConfig,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    categories: Optional[set[int]] = None,
) -> tuple[TorrentRecord, ...]:
    """Applies category filtering and paging to a set of search results."""
    if categories:
        records = tuple(r for r in records if torznab_category(r.name) in categories)

    page_size = config.max_results if limit is None else min(limit, config.max_results)
    start = offset or 0
    return records[start : start + page_size]


@router.get("/api/torznab")
async def torznab_api(
    t: str = "search",
    q: str = "",
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    cat: Optional[str] = None,
    catalog: Catalog = Depends(get_catalog),
    config: ServerConfig = Depends(get_config),
) -> Response:
    """
    Torznab entry point. ``t=caps`` returns the capabilities document; any
    other function (search, tvsearch, movie, ...) runs a name search.
    """
    if t == "caps":
        return Response(content=render_caps(config), media_type=XML_MEDIA_TYPE)

    try:
        results = select_results(
            catalog.search(q),
            config,
            limit=_parse_non_negative("limit", limit),
            offset=_parse_non_negative("offset", offset),
            categories=_parse_categories(cat),
        )
    except InvalidParameter as e:
        logger.warning(f"[TORZNAB] Rejected request: {e}")
        return Response(
            content=render_error(ERROR_INCORRECT_PARAMETER, str(e)),
            status_code=400,
            media_type=XML_MEDIA_TYPE,
        )

    logger.info(f"[TORZNAB] t={t} q='{q}' returned {len(results)} items")
    return Response(
        content=render_search_feed(results, config), media_type=XML_MEDIA_TYPE
    )
