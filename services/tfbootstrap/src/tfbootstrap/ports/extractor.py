from pathlib import Path
from typing import Protocol


class ExtractorPort(Protocol):
    def extract_single(self, archive: Path, dest_dir: Path) -> Path: ...
