from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import yaml

from tfbootstrap.adapters.errors import ConfigError, ConfigSchemaError
from tfbootstrap.domain.json_types import JsonDict, as_json_dict

DEFAULT_CONFIG_NAME = "tfbootstrap.yaml"


def schema_path() -> Path:
    return Path(__file__).resolve().parents[2] / "schemas" / "config.schema.v1.json"


def load_schema() -> JsonDict:
    return as_json_dict(json.loads(schema_path().read_text(encoding="utf-8")))


class YamlConfigSource:
    def __init__(self, schema: JsonDict | None = None) -> None:
        self.schema = schema if schema is not None else load_schema()

    def load(self, path: Path) -> JsonDict:
        try:
            raw: object = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigError(
                "Unable to read config file", details={"path": str(path)}, cause=e
            )
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            details: JsonDict = {"path": str(path)}
            if mark is not None:
                details["line"] = mark.line + 1
            raise ConfigError("Config file is not valid YAML", details=details, cause=e)
        if not isinstance(raw, dict):
            raise ConfigSchemaError(
                "Config file must contain a mapping", details={"path": str(path)}
            )
        data = as_json_dict(raw)
        try:
            jsonschema.validate(data, self.schema)
        except jsonschema.ValidationError as e:
            field_path = ".".join(str(p) for p in e.absolute_path)
            raise ConfigSchemaError(
                e.message,
                details={"path": str(path), "field": field_path or None},
                cause=e,
            )
        return data
