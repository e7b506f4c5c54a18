from dataclasses import dataclass

from tfbootstrap.domain.json_types import JsonDict


@dataclass
class AdapterError(Exception):
    message: str
    details: JsonDict | None = None
    hint: str | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class DownloadError(AdapterError):
    pass


class ArchiveError(AdapterError):
    pass


class ConfigError(AdapterError):
    pass


class ConfigSchemaError(ConfigError):
    pass
