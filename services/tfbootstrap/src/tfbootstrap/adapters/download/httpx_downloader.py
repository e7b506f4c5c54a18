from __future__ import annotations

import logging
from pathlib import Path

import httpx

from tfbootstrap.adapters.errors import DownloadError

logger = logging.getLogger(__name__)


class HttpxDownloader:
    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._client = client
        self.timeout = timeout
        self.chunk_size = chunk_size

    def _open_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(timeout=self.timeout, follow_redirects=True)

    def download(self, url: str, dest: Path) -> Path:
        logger.info("Downloading %s from %s", dest.name, url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        client = self._open_client()
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                with dest.open("wb") as out:
                    for chunk in response.iter_bytes(self.chunk_size):
                        out.write(chunk)
        except httpx.HTTPStatusError as e:
            dest.unlink(missing_ok=True)
            raise DownloadError(
                f"Download failed with HTTP {e.response.status_code}",
                details={"url": url, "status": e.response.status_code},
                cause=e,
            )
        except (httpx.HTTPError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise DownloadError("Download failed", details={"url": url}, cause=e)
        finally:
            if self._client is None:
                client.close()
        return dest
