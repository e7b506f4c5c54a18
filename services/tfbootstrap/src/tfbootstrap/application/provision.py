from __future__ import annotations

import logging
from pathlib import Path
import shutil
import tempfile

from tfbootstrap.adapters.archive.zip_extractor import ZipExtractor
from tfbootstrap.adapters.download.httpx_downloader import HttpxDownloader
from tfbootstrap.adapters.errors import AdapterError
from tfbootstrap.application.install_record import (
    build_record,
    read_install_record,
    record_path,
    recorded_version,
    write_install_record,
)
from tfbootstrap.domain.diagnostics import Diagnostic, Severity, ValueLocation
from tfbootstrap.domain.release import (
    Platform,
    TerraformRelease,
    UnsupportedPlatformError,
    detect_platform,
)
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import Settings
from tfbootstrap.ports.downloader import DownloaderPort
from tfbootstrap.ports.extractor import ExtractorPort

logger = logging.getLogger(__name__)


def find_terraform(settings: Settings, platform: Platform) -> Path | None:
    """Locate an executable terraform.

    With ``install_dir`` set only that directory is searched. Otherwise ``PATH``
    is searched first, then the default install directory.
    """
    name = platform.executable_name
    if settings.install_dir is not None:
        found = shutil.which(name, path=str(settings.install_dir))
    else:
        found = shutil.which(name) or shutil.which(
            name, path=str(settings.target_install_dir())
        )
    return Path(found) if found else None


def is_compatible(binary: Path, version: str) -> bool:
    # Binaries without an install record are trusted as-is.
    record = read_install_record(record_path(binary))
    if record.value is None:
        return not any(d.code == "INSTALL_RECORD_PARSE_FAILED" for d in record.diagnostics)
    recorded = recorded_version(record.value)
    return recorded is None or recorded == version


def install_terraform(
    settings: Settings,
    platform: Platform,
    downloader: DownloaderPort,
    extractor: ExtractorPort,
) -> Path:
    release = TerraformRelease(
        version=settings.terraform_version,
        platform=platform,
        base_url=settings.release_base_url,
    )
    install_dir = settings.target_install_dir()
    with tempfile.TemporaryDirectory(prefix="tfbootstrap-") as tmp:
        archive = downloader.download(release.url, Path(tmp) / release.filename)
        binary = extractor.extract_single(archive, install_dir)
        write_install_record(record_path(binary), build_record(release, archive))
    return binary


def ensure_terraform(
    settings: Settings,
    *,
    downloader: DownloaderPort | None = None,
    extractor: ExtractorPort | None = None,
    platform: Platform | None = None,
) -> Result[Path]:
    try:
        resolved_platform = platform or detect_platform()
    except UnsupportedPlatformError as e:
        return Result(
            diagnostics=[
                Diagnostic(
                    code="PLATFORM_UNSUPPORTED",
                    rule="provision.platform",
                    severity=Severity.ERROR,
                    message=str(e),
                    is_execution=True,
                )
            ]
        )

    existing = find_terraform(settings, resolved_platform)
    if existing is not None:
        if is_compatible(existing, settings.terraform_version):
            logger.info("Using terraform at %s", existing)
            return Result(value=existing)
        logger.info(
            "Terraform at %s is not version %s", existing, settings.terraform_version
        )

    logger.info("Installing terraform %s", settings.terraform_version)
    try:
        binary = install_terraform(
            settings,
            resolved_platform,
            downloader or HttpxDownloader(),
            extractor or ZipExtractor(),
        )
    except (AdapterError, OSError) as e:
        hint = e.hint if isinstance(e, AdapterError) else None
        details = e.details if isinstance(e, AdapterError) else None
        return Result(
            diagnostics=[
                Diagnostic(
                    code="TERRAFORM_INSTALL_FAILED",
                    rule="provision.install",
                    severity=Severity.ERROR,
                    message=f"Unable to install terraform: {e}",
                    location=ValueLocation("terraform_version", settings.terraform_version),
                    hint=hint,
                    details=details,
                    is_execution=True,
                )
            ]
        )
    logger.info("Installed terraform %s to %s", settings.terraform_version, binary)
    return Result(
        value=binary,
        artifacts=[
            {
                "kind": "terraform_binary",
                "path": str(binary),
                "version": settings.terraform_version,
                "os": resolved_platform.os,
                "arch": resolved_platform.arch,
            }
        ],
    )
