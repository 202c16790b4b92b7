# webseed_torznab/utils.py

import math
import os
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional
from urllib.parse import quote, quote_plus

from .services.torrent_data import TorrentRecord

# Torznab/Newznab category ids advertised in the caps document.
CATEGORY_MOVIES = 2000
CATEGORY_TV = 5000
CATEGORY_OTHER = 7000
CATEGORIES = {
    CATEGORY_MOVIES: "Movies",
    CATEGORY_TV: "TV",
    CATEGORY_OTHER: "Other",
}

_EPISODE_RE = re.compile(r"(?i)\b(S\d{1,2}E\d{1,3}|\d{1,2}x\d{1,3})\b")
_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")


def format_bytes(size_bytes: int) -> str:
    """Converts bytes into a human-readable string (e.g., KB, MB, GB)."""
    if size_bytes <= 0:
        return "0B"
    size_name = ("B", "KB", "MB", "GB", "TB", "PB")
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(size_name) - 1)
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s} {size_name[i]}"


def detect_media_type(name: str) -> str:
    """
    Guesses whether a release name is a TV episode, a movie or neither.

    Examples:
        - "Show.Name.S01E02.1080p" -> "tv"
        - "Movie.Title.2023.1080p" -> "movie"
        - "ubuntu-24.04-desktop-amd64.iso" -> "unknown"
    """
    cleaned_name = re.sub(r"[\._]", " ", name)
    if _EPISODE_RE.search(cleaned_name):
        return "tv"
    if _YEAR_RE.search(cleaned_name):
        return "movie"
    return "unknown"


def torznab_category(name: str) -> int:
    media_type = detect_media_type(name)
    if media_type == "tv":
        return CATEGORY_TV
    if media_type == "movie":
        return CATEGORY_MOVIES
    return CATEGORY_OTHER


def format_rfc1123(timestamp: Optional[int]) -> Optional[str]:
    """Formats a Unix timestamp as RFC 1123 with a numeric zone, in UTC."""
    if timestamp is None:
        return None
    return format_datetime(datetime.fromtimestamp(timestamp, tz=timezone.utc))


def build_download_url(base_url: str, record: TorrentRecord) -> str:
    """
    Public URL that serves the record's original ``.torrent`` file. The name
    is quoted from its on-disk bytes so non-UTF-8 names still form a URL.
    """
    return f"{base_url}/torrent/{quote(os.fsencode(record.file_name), safe='')}"


def build_magnet_link(record: TorrentRecord) -> Optional[str]:
    """
    Builds a magnet URI carrying the first web seed, or None when the
    torrent has no web seeds.
    """
    if not record.web_seeds:
        return None
    # Only the first web seed is embedded, matching existing consumers.
    return (
        f"magnet:?xt=urn:btih:{record.info_hash}"
        f"&dn={quote_plus(record.name)}"
        f"&ws={quote_plus(record.web_seeds[0])}"
    )
