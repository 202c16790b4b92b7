import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Ensure root path is available for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from webseed_torznab.app import create_app  # noqa: E402
from webseed_torznab.config import ServerConfig  # noqa: E402
from webseed_torznab.services.bencode import encode  # noqa: E402
from webseed_torznab.services.catalog import Catalog  # noqa: E402

PIECES = bytes(range(20))


@pytest.fixture
def make_metainfo():
    """Builds a decoded metainfo dictionary for a single- or multi-file torrent."""

    def _make(
        name: str = "a.txt",
        length: int = 5,
        files: list[dict[bytes, Any]] | None = None,
        extra: dict[bytes, Any] | None = None,
    ) -> dict[bytes, Any]:
        info: dict[bytes, Any] = {
            b"name": name.encode("utf-8"),
            b"piece length": 16384,
            b"pieces": PIECES,
        }
        if files is None:
            info[b"length"] = length
        else:
            info[b"files"] = files
        meta: dict[bytes, Any] = {
            b"announce": b"http://tracker.example/announce",
            b"info": info,
        }
        meta.update(extra or {})
        return meta

    return _make


@pytest.fixture
def torrent_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "torrents"
    directory.mkdir()
    return directory


@pytest.fixture
def write_torrent(torrent_dir: Path, make_metainfo):
    """Writes a .torrent file into ``torrent_dir`` from a dict or raw bytes."""

    def _write(filename: str, content: dict[bytes, Any] | bytes | None = None, **kwargs):
        if content is None:
            content = make_metainfo(**kwargs)
        data = content if isinstance(content, bytes) else encode(content)
        path = torrent_dir / filename
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def server_config(torrent_dir: Path) -> ServerConfig:
    return ServerConfig(
        torrents_dir=str(torrent_dir),
        base_url="http://indexer.test",
        max_results=50,
    )


@pytest.fixture
def make_client(server_config: ServerConfig):
    """Returns a factory so tests can write torrent files before loading."""

    def _make(**client_kwargs) -> TestClient:
        catalog = Catalog(server_config.torrents_dir)
        catalog.load_all()
        app = create_app(server_config, catalog, load_on_startup=False)
        return TestClient(app, **client_kwargs)

    return _make
