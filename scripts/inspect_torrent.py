"""
Prints the metadata extracted from one or more .torrent files as JSON.

Run:
    python scripts/inspect_torrent.py [--magnet] FILE [FILE ...]

This does not start the server. It runs the same parser the catalog uses, so
it is handy for checking why a file is skipped or which info-hash it gets.
"""

from __future__ import annotations

import argparse
import json
import sys

from webseed_torznab.services.torrent_parser import (
    MalformedTorrent,
    UnreadableSource,
    load_record,
)
from webseed_torznab.utils import build_magnet_link


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Decode .torrent files and print their metadata as JSON"
    )
    parser.add_argument("files", nargs="+", help="Paths to .torrent files")
    parser.add_argument(
        "--magnet",
        action="store_true",
        help="Include the web-seed magnet link when the torrent has one",
    )
    args = parser.parse_args()

    failures = 0
    for path in args.files:
        try:
            record = load_record(path)
        except (MalformedTorrent, UnreadableSource) as e:
            print(f"{path}: {e}", file=sys.stderr)
            failures += 1
            continue

        data = record.to_dict()
        if args.magnet:
            data["magnet_link"] = build_magnet_link(record)
        print(json.dumps(data, indent=2, ensure_ascii=False))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
