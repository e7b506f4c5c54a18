import tomllib

from tfbootstrap.application.install_record import (
    read_install_record,
    recorded_version,
    write_install_record,
)


def test_read_install_record_missing(tmp_path):
    result = read_install_record(tmp_path / ".tfbootstrap.toml")
    assert any(d.code == "INSTALL_RECORD_MISSING" for d in result.diagnostics)


def test_read_install_record_parse_failure(tmp_path):
    path = tmp_path / ".tfbootstrap.toml"
    path.write_text("[terraform\nversion = ")
    result = read_install_record(path)
    assert result.value is None
    assert result.diagnostics[0].code == "INSTALL_RECORD_PARSE_FAILED"


def test_write_install_record_is_valid_toml(tmp_path):
    path = tmp_path / ".tfbootstrap.toml"
    write_install_record(
        path,
        {"terraform": {"version": "0.12.24", "os": "linux", "arch": "amd64"}},
    )
    parsed = tomllib.loads(path.read_text(encoding="utf-8"))
    assert parsed["terraform"]["arch"] == "amd64"
    assert recorded_version(read_install_record(path).value or {}) == "0.12.24"
