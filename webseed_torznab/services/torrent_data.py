from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class TorrentFile:
    """A single file inside a torrent.

    Attributes:
        path: Path components relative to the torrent root.
        length: File size in bytes.
    """

    path: tuple[str, ...]
    length: int

    def to_dict(self) -> dict[str, Any]:
        return {"path": list(self.path), "length": self.length}


@dataclass(frozen=True)
class TorrentRecord:
    """Structured, immutable metadata for a parsed ``.torrent`` file.

    Attributes:
        name: Display name taken from the info dictionary.
        info_hash: Lowercase hex SHA-1 of the canonical info dictionary.
        total_size: Sum of all file lengths in bytes.
        files: Files in the order listed by the torrent.
        web_seeds: HTTP(S) web seed URLs from ``url-list``.
        source_path: Location on disk the record was loaded from.
        created_by: Optional client that produced the torrent.
        comment: Optional free-text comment.
        creation_date: Optional Unix timestamp from ``creation date``.
        announce: Optional primary tracker URL.
        trackers: All tracker URLs, primary first, without duplicates.
        piece_length: Optional piece size in bytes.
        private: Whether the torrent sets the private flag.
    """

    name: str
    info_hash: str
    total_size: int
    files: tuple[TorrentFile, ...]
    web_seeds: tuple[str, ...]
    source_path: str
    created_by: str = ""
    comment: str = ""
    creation_date: Optional[int] = None
    announce: str = ""
    trackers: tuple[str, ...] = field(default_factory=tuple)
    piece_length: Optional[int] = None
    private: bool = False

    @property
    def file_name(self) -> str:
        """Base name of the source file, used for download links."""
        return os.path.basename(self.source_path)

    @property
    def display_path(self) -> str:
        """
        ``source_path`` made printable. File names that are not valid UTF-8
        come back from the OS with lone surrogates, which cannot be encoded
        into JSON or URLs; those bytes are shown as replacement characters.
        """
        return _printable(self.source_path)

    @property
    def display_file_name(self) -> str:
        return _printable(self.file_name)

    @property
    def created_at(self) -> Optional[datetime]:
        if self.creation_date is None:
            return None
        return datetime.fromtimestamp(self.creation_date, tz=timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Returns the JSON representation served by the listing API."""
        created_at = self.created_at
        return {
            "name": self.name,
            "info_hash": self.info_hash,
            "size": self.total_size,
            "files": [f.to_dict() for f in self.files],
            "web_seeds": list(self.web_seeds),
            "created_by": self.created_by,
            "created_date": created_at.isoformat() if created_at else None,
            "comment": self.comment,
            "file_path": self.display_path,
            "trackers": list(self.trackers),
            "piece_length": self.piece_length,
            "private": self.private,
        }


def _printable(path: str) -> str:
    return os.fsencode(path).decode("utf-8", errors="replace")
