from pathlib import Path
from typing import Protocol


class DownloaderPort(Protocol):
    def download(self, url: str, dest: Path) -> Path: ...
