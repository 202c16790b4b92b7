"""Torznab and JSON API over a directory of local .torrent files."""

__version__ = "1.0.0"
