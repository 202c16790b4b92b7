from fastapi.testclient import TestClient

from webseed_torznab.app import create_app
from webseed_torznab.config import ServerConfig


def test_health_check(make_client):
    response = make_client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_index_page_lists_endpoints_and_count(make_client, write_torrent):
    write_torrent("a.torrent", name="One", length=2048)
    write_torrent("b.torrent", name="Two", length=2048)

    response = make_client().get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<strong>2</strong> torrent files (4.0 KB)" in response.text
    assert "/api/torznab" in response.text
    assert "http://indexer.test/api/torrents" in response.text


def test_download_serves_original_file(make_client, write_torrent):
    path = write_torrent("My Movie.torrent", name="My Movie")
    client = make_client()

    response = client.get("/torrent/My%20Movie.torrent")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/x-bittorrent"
    assert "attachment" in response.headers["content-disposition"]
    assert "My%20Movie.torrent" in response.headers["content-disposition"]
    assert response.content == path.read_bytes()


def test_download_link_from_feed_resolves(make_client, write_torrent):
    write_torrent("Some Show S01E01.torrent", name="Some Show S01E01")
    client = make_client()
    link = client.get("/api/torrents").json()["torrents"][0]["file_path"]
    assert link.endswith("Some Show S01E01.torrent")

    response = client.get("/torrent/Some%20Show%20S01E01.torrent")

    assert response.status_code == 200


def test_download_unknown_file_is_404(make_client):
    response = make_client().get("/torrent/nonexistent.torrent")

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Torrent file not found"}


def test_download_file_outside_catalog_is_404(make_client, torrent_dir, write_torrent):
    client = make_client()
    # Written after the catalog was loaded, so it is not served yet.
    write_torrent("late.torrent", name="Late")

    assert client.get("/torrent/late.torrent").status_code == 404


def test_download_removed_file_is_404(make_client, write_torrent):
    path = write_torrent("gone.torrent", name="Gone")
    client = make_client()
    path.unlink()

    assert client.get("/torrent/gone.torrent").status_code == 404


def test_download_rejects_other_extensions(make_client, torrent_dir):
    (torrent_dir / "notes.txt").write_text("secret")

    response = make_client().get("/torrent/notes.txt")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file type"


def test_unknown_route_is_json_404(make_client):
    response = make_client().get("/does-not-exist")

    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_startup_loads_catalog(server_config, write_torrent):
    write_torrent("a.torrent", name="Loaded At Startup")
    app = create_app(server_config)

    with TestClient(app) as client:
        body = client.get("/api/torrents").json()

    assert body["count"] == 1
    assert body["torrents"][0]["name"] == "Loaded At Startup"


def test_startup_with_missing_directory_serves_empty_catalog(tmp_path, mocker):
    config = ServerConfig(torrents_dir=str(tmp_path / "missing"))
    error_mock = mocker.patch("webseed_torznab.app.logger.error")

    with TestClient(create_app(config)) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/api/torrents").json()["count"] == 0

    error_mock.assert_called_once()
