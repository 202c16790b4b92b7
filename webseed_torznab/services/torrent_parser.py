# webseed_torznab/services/torrent_parser.py

import hashlib
import os
from datetime import datetime, timezone
from typing import Optional

from ..config import logger
from .bencode import (
    BencodeValue,
    MalformedBencode,
    decode_dict,
    encode,
    extract_subtree,
)
from .torrent_data import TorrentFile, TorrentRecord


class MalformedTorrent(ValueError):
    """Raised when a metainfo file lacks the data needed to build a record."""


class UnreadableSource(OSError):
    """Raised when a torrent file or the torrents directory cannot be read."""


def compute_info_hash(info: dict[bytes, BencodeValue]) -> str:
    """
    Returns the v1 info-hash: the lowercase hex SHA-1 digest of the canonical
    encoding of the info dictionary. The dictionary is re-encoded rather than
    hashed from the original bytes, since producers do not always sort keys.
    """
    return hashlib.sha1(encode(info)).hexdigest()


def build_record(data: bytes, source_path: str) -> TorrentRecord:
    """
    Decodes the raw bytes of a ``.torrent`` file into a TorrentRecord.

    Missing or malformed identity data (bencode syntax, the info dictionary,
    file lengths) raises MalformedTorrent. Decorative fields such as web
    seeds, comment, creator and creation date fall back to empty values.
    """
    try:
        meta = decode_dict(data)
    except MalformedBencode as e:
        raise MalformedTorrent(f"Invalid bencode: {e}") from e

    info = extract_subtree(meta, b"info")
    if not isinstance(info, dict):
        raise MalformedTorrent("Missing or invalid 'info' dictionary")

    info_hash = compute_info_hash(info)
    name = _text(info.get(b"name")) or _stem(source_path)
    files = _parse_files(info, name)
    announce = _text(meta.get(b"announce"))

    record = TorrentRecord(
        name=name,
        info_hash=info_hash,
        total_size=sum(f.length for f in files),
        files=files,
        web_seeds=normalize_web_seeds(extract_subtree(meta, b"url-list")),
        source_path=source_path,
        created_by=_text(meta.get(b"created by")),
        comment=_text(meta.get(b"comment")),
        creation_date=_timestamp(meta.get(b"creation date")),
        announce=announce,
        trackers=_collect_trackers(announce, meta.get(b"announce-list")),
        piece_length=_positive_int(info.get(b"piece length")),
        private=info.get(b"private") == 1,
    )
    logger.debug(
        f"[PARSER] Parsed '{record.name}' ({record.info_hash}) from {source_path}"
    )
    return record


def load_record(path: str) -> TorrentRecord:
    """Reads a ``.torrent`` file from disk and builds its record."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise UnreadableSource(f"Could not read '{path}': {e}") from e
    return build_record(data, path)


def normalize_web_seeds(url_list: Optional[BencodeValue]) -> tuple[str, ...]:
    """
    Normalizes the ``url-list`` field, which may be absent, a single byte
    string or a list. Non-string list items and empty strings are skipped;
    any other shape yields no web seeds.
    """
    if isinstance(url_list, bytes):
        candidates = [url_list]
    elif isinstance(url_list, list):
        candidates = [item for item in url_list if isinstance(item, bytes)]
    else:
        return ()

    seeds = (_text(candidate).strip() for candidate in candidates)
    return tuple(seed for seed in seeds if seed)


def _parse_files(
    info: dict[bytes, BencodeValue], name: str
) -> tuple[TorrentFile, ...]:
    """Builds the file list for single-file and multi-file layouts."""
    length = info.get(b"length")
    if isinstance(length, int):
        if length < 0:
            raise MalformedTorrent(f"Negative 'length' ({length}) in info dictionary")
        return (TorrentFile(path=(name,), length=length),)

    entries = info.get(b"files")
    if not isinstance(entries, list) or not entries:
        raise MalformedTorrent(
            "Info dictionary has neither a 'length' nor a non-empty 'files' list"
        )

    files: list[TorrentFile] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MalformedTorrent(f"File entry {index} is not a dictionary")

        file_length = entry.get(b"length")
        if not isinstance(file_length, int) or file_length < 0:
            raise MalformedTorrent(f"File entry {index} has an invalid 'length'")

        path = entry.get(b"path")
        if (
            not isinstance(path, list)
            or not path
            or not all(isinstance(part, bytes) for part in path)
        ):
            raise MalformedTorrent(f"File entry {index} has an invalid 'path'")

        files.append(
            TorrentFile(path=tuple(_text(part) for part in path), length=file_length)
        )
    return tuple(files)


def _collect_trackers(
    announce: str, announce_list: Optional[BencodeValue]
) -> tuple[str, ...]:
    """Flattens ``announce`` and the ``announce-list`` tiers, keeping order."""
    urls: list[str] = [announce] if announce else []
    if isinstance(announce_list, list):
        for tier in announce_list:
            # Some producers write a flat list instead of a list of tiers.
            items = tier if isinstance(tier, list) else [tier]
            urls.extend(_text(item) for item in items if isinstance(item, bytes))

    return tuple(dict.fromkeys(url for url in urls if url))


def _timestamp(value: Optional[BencodeValue]) -> Optional[int]:
    """Returns ``value`` when it is a usable Unix timestamp, otherwise None."""
    if not isinstance(value, int):
        return None
    try:
        datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return value


def _positive_int(value: Optional[BencodeValue]) -> Optional[int]:
    return value if isinstance(value, int) and value > 0 else None


def _text(value: Optional[BencodeValue]) -> str:
    """Decodes a byte string as UTF-8, returning "" for any other type."""
    if not isinstance(value, bytes):
        return ""
    return value.decode("utf-8", errors="replace")


def _stem(path: str) -> str:
    stem = os.path.splitext(os.path.basename(path))[0]
    return os.fsencode(stem).decode("utf-8", errors="replace")
