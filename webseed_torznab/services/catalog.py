# webseed_torznab/services/catalog.py

import asyncio
import os
import threading
import time
from typing import Optional

from ..config import TORRENT_EXTENSION, logger
from ..utils import format_bytes
from .bencode import MalformedBencode
from .torrent_data import TorrentRecord
from .torrent_parser import MalformedTorrent, UnreadableSource, load_record


class Catalog:
    """
    In-memory collection of the torrents found in one directory.

    The records are held as a single immutable tuple. A reload builds a new
    tuple off to the side and swaps the reference in one assignment, so a
    reader that grabbed the previous snapshot keeps seeing it unchanged and
    never observes a half-built set.
    """

    def __init__(self, directory: str):
        self.directory = directory
        self._records: tuple[TorrentRecord, ...] = ()
        self._loaded_at: Optional[float] = None
        # Serializes writers only; readers never take it.
        self._load_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    @property
    def loaded_at(self) -> Optional[float]:
        """Unix time of the last successful load, or None before the first."""
        return self._loaded_at

    @property
    def total_size(self) -> int:
        return sum(record.total_size for record in self._records)

    def load_all(self, directory: Optional[str] = None) -> int:
        """
        Scans the directory and replaces the catalog with the parsed records.

        Files that fail to parse are logged and skipped. If the directory
        itself cannot be listed, UnreadableSource is raised and the current
        records are left in place.

        Returns:
            The number of records now in the catalog.
        """
        target = directory or self.directory
        with self._load_lock:
            records = scan_directory(target)
            self._records = records
            self._loaded_at = time.time()
            self.directory = target

        logger.info(
            f"[CATALOG] Loaded {len(records)} torrent files "
            f"({format_bytes(sum(r.total_size for r in records))}) from {target}"
        )
        return len(records)

    async def refresh(self) -> int:
        """Reloads the catalog in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.load_all)

    def all(self) -> tuple[TorrentRecord, ...]:
        """Returns the current snapshot in load order."""
        return self._records

    def search(self, term: str = "") -> tuple[TorrentRecord, ...]:
        """
        Case-insensitive substring search on record names. An empty term
        returns every record. Matches keep catalog order; there is no ranking.
        """
        snapshot = self._records
        if not term:
            return snapshot
        needle = term.casefold()
        return tuple(record for record in snapshot if needle in record.name.casefold())

    def find_by_filename(self, filename: str) -> Optional[TorrentRecord]:
        """
        Returns the record loaded from a file with this base name, if any.
        Names decoded from a URL match non-UTF-8 files by their printable form.
        """
        for record in self._records:
            if filename in (record.file_name, record.display_file_name):
                return record
        return None

    def find_by_info_hash(self, info_hash: str) -> Optional[TorrentRecord]:
        """Returns the first record with this info-hash (any letter case)."""
        wanted = info_hash.strip().lower()
        for record in self._records:
            if record.info_hash == wanted:
                return record
        return None


def is_torrent_filename(filename: str) -> bool:
    return filename.lower().endswith(TORRENT_EXTENSION)


def scan_directory(directory: str) -> tuple[TorrentRecord, ...]:
    """
    Parses every ``.torrent`` file directly inside ``directory``, in file
    name order. Per-file failures are logged and skipped.

    Raises:
        UnreadableSource: If the directory cannot be listed.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(
                (entry for entry in it if is_torrent_filename(entry.name)),
                key=lambda entry: entry.name,
            )
    except OSError as e:
        raise UnreadableSource(
            f"Error reading torrents directory '{directory}': {e}"
        ) from e

    records: list[TorrentRecord] = []
    for entry in entries:
        try:
            if not entry.is_file():
                continue
            records.append(load_record(entry.path))
        except (MalformedBencode, MalformedTorrent, OSError) as e:
            logger.warning(f"[CATALOG] Skipping torrent file {entry.name}: {e}")
    return tuple(records)
