"""Downloading images into the local cache directory."""

from __future__ import annotations

from os import PathLike
from pathlib import Path

import requests

from pikiclient.config import REFERER, make_session

FALLBACK_IMAGE = "../assets/pixiv_no_profile.png"


def cache_file_name(url: str) -> str:
    """File name an image is cached under: the last path segment of its URL."""
    return url[url.rfind("/") + 1 :]


class ImageDownloader:
    """Fetches images once and serves later requests from the cache directory."""

    def __init__(
        self,
        cache_path: str | PathLike[str],
        session: requests.Session | None = None,
    ) -> None:
        self.cache_path = Path(cache_path)
        self.session = session if session is not None else make_session()
        self.progress = 0
        self.total = 0

    def download(self, url: str) -> str:
        """Return a file URL for the image, or the placeholder image if it failed."""
        self.cache_path.mkdir(parents=True, exist_ok=True)
        target = self.cache_path / cache_file_name(url)
        if target.exists():
            return f"file://{target}"

        self.progress = 0
        try:
            with self.session.get(url, headers={"Referer": REFERER}, stream=True) as reply:
                self.total = int(reply.headers.get("Content-Length", -1))
                chunks = []
                for chunk in reply.iter_content(chunk_size=64 * 1024):
                    chunks.append(chunk)
                    self.progress += len(chunk)
                status = reply.status_code
        except requests.RequestException:
            return FALLBACK_IMAGE

        if status != 200:
            return FALLBACK_IMAGE
        target.write_bytes(b"".join(chunks))
        return f"file://{target}"