import pytest

from tfbootstrap.adapters.config.yaml_config import YamlConfigSource, schema_path
from tfbootstrap.adapters.errors import ConfigError, ConfigSchemaError


def test_schema_file_is_shipped():
    assert schema_path().is_file()


def test_load_valid_config(tmp_path):
    path = tmp_path / "tfbootstrap.yaml"
    path.write_text(
        "terraform_version: 1.5.7\nextra_args: ['-var', 'env=dev']\ntimeout_seconds: 600\n"
    )
    data = YamlConfigSource().load(path)
    assert data["terraform_version"] == "1.5.7"
    assert data["extra_args"] == ["-var", "env=dev"]


def test_empty_config_is_empty_mapping(tmp_path):
    path = tmp_path / "tfbootstrap.yaml"
    path.write_text("")
    assert YamlConfigSource().load(path) == {}


def test_unknown_key_fails_schema(tmp_path):
    path = tmp_path / "tfbootstrap.yaml"
    path.write_text("terraform_versoin: 1.5.7\n")
    with pytest.raises(ConfigSchemaError):
        YamlConfigSource().load(path)


def test_bad_chunk_size_fails_schema(tmp_path):
    path = tmp_path / "tfbootstrap.yaml"
    path.write_text("chunk_size: 0\n")
    with pytest.raises(ConfigSchemaError) as excinfo:
        YamlConfigSource().load(path)
    assert excinfo.value.details is not None
    assert excinfo.value.details["field"] == "chunk_size"


def test_invalid_yaml_raises_config_error(tmp_path):
    path = tmp_path / "tfbootstrap.yaml"
    path.write_text("terraform_version: [unclosed\n")
    with pytest.raises(ConfigError) as excinfo:
        YamlConfigSource().load(path)
    assert not isinstance(excinfo.value, ConfigSchemaError)


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError, match="Unable to read config file"):
        YamlConfigSource().load(tmp_path / "absent.yaml")
