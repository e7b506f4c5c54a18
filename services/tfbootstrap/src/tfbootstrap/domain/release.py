from __future__ import annotations

from dataclasses import dataclass
import platform as _platform

DEFAULT_RELEASE_BASE_URL = "https://releases.hashicorp.com/terraform"

_OS_NAMES = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "sunos": "solaris",
}

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
}


class UnsupportedPlatformError(ValueError):
    pass


@dataclass(frozen=True)
class Platform:
    os: str
    arch: str

    @property
    def executable_name(self) -> str:
        return "terraform.exe" if self.os == "windows" else "terraform"


def detect_platform(system: str | None = None, machine: str | None = None) -> Platform:
    raw_system = (system if system is not None else _platform.system()).lower()
    raw_machine = (machine if machine is not None else _platform.machine()).lower()
    os_name = _OS_NAMES.get(raw_system)
    if os_name is None:
        raise UnsupportedPlatformError(f"Unsupported operating system: {raw_system}")
    arch = _ARCH_NAMES.get(raw_machine)
    if arch is None:
        raise UnsupportedPlatformError(f"Unsupported architecture: {raw_machine}")
    return Platform(os=os_name, arch=arch)


@dataclass(frozen=True)
class TerraformRelease:
    version: str
    platform: Platform
    base_url: str = DEFAULT_RELEASE_BASE_URL

    @property
    def filename(self) -> str:
        return f"terraform_{self.version}_{self.platform.os}_{self.platform.arch}.zip"

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.version}/{self.filename}"
