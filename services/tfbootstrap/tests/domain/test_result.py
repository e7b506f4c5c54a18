from tfbootstrap.domain.diagnostics import Diagnostic, Severity, ValueLocation
from tfbootstrap.domain.result import Result


def test_exit_code_precedence_exec_over_validation():
    r = Result(diagnostics=[
        Diagnostic(code="VAL", rule="r", severity=Severity.ERROR, message="v"),
        Diagnostic(code="EXEC", rule="r", severity=Severity.ERROR, message="e", is_execution=True),
    ])
    assert r.exit_code == 3


def test_warnings_do_not_fail():
    r = Result(value=1, diagnostics=[
        Diagnostic(code="W", rule="r", severity=Severity.WARN, message="w", is_execution=True),
    ])
    assert r.exit_code == 0
    assert r.errors == []


def test_render_appends_location():
    diag = Diagnostic(
        code="SETTINGS_CHUNK_SIZE_INVALID",
        rule="settings.chunk_size",
        severity=Severity.ERROR,
        message="chunk_size must be positive",
        location=ValueLocation("chunk_size", "0"),
    )
    assert diag.render() == "chunk_size must be positive (chunk_size='0')"
    assert Diagnostic(code="X", rule="r", severity=Severity.INFO, message="m").render() == "m"
