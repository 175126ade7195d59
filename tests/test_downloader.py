import pytest
import requests
import responses

from pikiclient.config import REFERER
from pikiclient.downloader import FALLBACK_IMAGE, ImageDownloader, cache_file_name

IMAGE_URL = "https://i.example.com/img/2025/01/01/123_p0.png"
BODY = b"\x89PNG\r\n\x1a\nimage-bytes"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_cache_file_name():
    assert cache_file_name(IMAGE_URL) == "123_p0.png"


def test_cache_file_name_without_slash():
    assert cache_file_name("plain.png") == "plain.png"


def test_download_writes_file(tmp_path, mocked):
    mocked.add(responses.GET, IMAGE_URL, body=BODY, status=200)
    downloader = ImageDownloader(tmp_path / "cache", requests.Session())
    result = downloader.download(IMAGE_URL)
    target = tmp_path / "cache" / "123_p0.png"
    assert result == f"file://{target}"
    assert target.read_bytes() == BODY
    assert downloader.progress == len(BODY)
    assert mocked.calls[0].request.headers["Referer"] == REFERER


def test_second_download_uses_cache(tmp_path, mocked):
    mocked.add(responses.GET, IMAGE_URL, body=BODY, status=200)
    downloader = ImageDownloader(tmp_path, requests.Session())
    first = downloader.download(IMAGE_URL)
    second = downloader.download(IMAGE_URL)
    assert first == second
    assert len(mocked.calls) == 1


def test_existing_file_needs_no_network(tmp_path, mocked):
    (tmp_path / "123_p0.png").write_bytes(b"cached")
    result = ImageDownloader(tmp_path).download(IMAGE_URL)
    assert result == f"file://{tmp_path / '123_p0.png'}"
    assert len(mocked.calls) == 0


def test_error_status_returns_fallback(tmp_path, mocked):
    mocked.add(responses.GET, IMAGE_URL, body=b"missing", status=404)
    result = ImageDownloader(tmp_path).download(IMAGE_URL)
    assert result == FALLBACK_IMAGE
    assert not (tmp_path / "123_p0.png").exists()


def test_connection_error_returns_fallback(tmp_path, mocked):
    result = ImageDownloader(tmp_path).download(IMAGE_URL)
    assert result == FALLBACK_IMAGE
    assert list(tmp_path.iterdir()) == []