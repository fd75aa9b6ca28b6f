"""Download the primary enclosure of an item to transient storage."""

import logging
import os
import posixpath
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from ..db import Connection, ItemStore
from ..errors import DownloadError
from ..models import Item

logger = logging.getLogger(__name__)

FALLBACK_NAME = "downloaded_file"
# Measured in UTF-8 bytes
MAX_STEM_BYTES = 100
CHUNK_SIZE = 64 * 1024


def derive_filename(request_url: str, final_path: str) -> str:
    """
    Derive a local filename from the URL that was requested and the path
    actually served after redirects.

    >>> derive_filename("https://cdn.example/ep.mp3", "/media/ep.mp3")
    'ep.mp3'
    >>> derive_filename("https://cdn.example/stream", "/")
    'downloaded_file.mp3'
    """
    base = posixpath.basename(final_path)
    fell_back = base in ("", ".", "/")
    if fell_back:
        base = FALLBACK_NAME

    stem, ext = posixpath.splitext(base)
    # Cut on a code point boundary
    stem = stem.encode("utf-8", "ignore")[:MAX_STEM_BYTES].decode("utf-8", "ignore")

    if request_url.endswith(".mp3") or fell_back:
        ext = ".mp3"
    elif not ext:
        ext = ".mp3"
    return stem + ext


class EnclosureDownloader:
    """Fetch enclosure media over HTTP into a download directory."""

    def __init__(
        self,
        download_dir: Path,
        timeout: float = 300.0,
        client: Optional[httpx.Client] = None,
        items: Optional[ItemStore] = None,
    ) -> None:
        """Initialize downloader."""
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self._client = client
        self.items = items or ItemStore()

    def _client_or_new(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(timeout=self.timeout, follow_redirects=True)

    def download(self, url: str) -> Path:
        """
        Download a URL into the download directory.

        Returns:
            Path of the downloaded file

        Raises:
            DownloadError: transport failure or non-2xx status; no file is left behind
        """
        self.download_dir.mkdir(parents=True, exist_ok=True)
        client = self._client_or_new()
        tmp_path: Optional[Path] = None
        try:
            with client.stream("GET", url, follow_redirects=True) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"bad status downloading {url}: {response.status_code}"
                    )

                with tempfile.NamedTemporaryFile(
                    dir=self.download_dir, prefix="echopan_", delete=False
                ) as tmp:
                    tmp_path = Path(tmp.name)
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        tmp.write(chunk)

                target = self.download_dir / derive_filename(url, response.url.path)

            os.replace(tmp_path, target)
        except DownloadError:
            self._discard(tmp_path)
            raise
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            self._discard(tmp_path)
            raise DownloadError(f"error downloading {url}: {e}") from e
        finally:
            if client is not self._client:
                client.close()

        logger.info("Downloaded %s to %s", url, target)
        return target

    @staticmethod
    def _discard(path: Optional[Path]) -> None:
        if path is not None and path.exists():
            path.unlink()

    def download_primary_enclosure(self, conn: Connection, item: Item) -> Optional[Path]:
        """
        Download the first enclosure of an item.

        Returns:
            Local path, or None when the item has no enclosure

        Raises:
            DownloadError: the enclosure could not be downloaded
        """
        enclosure = self.items.first_enclosure(conn, item.id)
        if enclosure is None:
            logger.info("No enclosures found for item '%s' (ID: %s)", item.title, item.id)
            return None

        logger.info("Downloading enclosure for item '%s': %s", item.title, enclosure.url)
        return self.download(enclosure.url)
