from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
import shutil
import stat
import zipfile

from tfbootstrap.adapters.errors import ArchiveError

logger = logging.getLogger(__name__)

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def _member_mode(info: zipfile.ZipInfo) -> int:
    mode = (info.external_attr >> 16) & 0o777
    return mode or 0o644


def _safe_target(dest_dir: Path, name: str) -> Path:
    member = PurePosixPath(name)
    if member.is_absolute() or ".." in member.parts or not member.parts:
        raise ArchiveError(
            "Archive member escapes destination", details={"member": name}
        )
    return dest_dir.joinpath(*member.parts)


class ZipExtractor:
    """Extracts release archives that hold exactly one executable."""

    def extract_single(self, archive: Path, dest_dir: Path) -> Path:
        logger.info("Unzipping %s to %s", archive, dest_dir)
        try:
            with zipfile.ZipFile(archive) as zf:
                members = [info for info in zf.infolist() if not info.is_dir()]
                if len(members) != 1:
                    raise ArchiveError(
                        f"Expected exactly one file in archive, found {len(members)}",
                        details={
                            "archive": str(archive),
                            "members": [m.filename for m in members],
                        },
                    )
                info = members[0]
                target = _safe_target(dest_dir, info.filename)
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, target.open("wb") as out:
                    shutil.copyfileobj(src, out)
        except zipfile.BadZipFile as e:
            raise ArchiveError(
                "Not a valid zip archive", details={"archive": str(archive)}, cause=e
            )
        except OSError as e:
            raise ArchiveError(
                "Unable to extract archive", details={"archive": str(archive)}, cause=e
            )
        target.chmod(_member_mode(info) | _EXEC_BITS)
        return target
