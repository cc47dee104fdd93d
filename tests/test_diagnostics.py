import io

from minipy import execute, tokenize
from minipy.diagnostics import Diagnostic, Diagnostics, ErrorCode, report


def collect(source: str):
    diagnostics = Diagnostics()
    out = io.StringIO()
    execute(source, out, diagnostics=diagnostics)
    return out.getvalue(), diagnostics


def test_collector():
    diagnostics = Diagnostics()
    assert not diagnostics
    diagnostic = diagnostics.report(ErrorCode.TYPE_MISMATCH, "bad", 3, 4)
    assert diagnostic == Diagnostic(ErrorCode.TYPE_MISMATCH, "bad", 3, 4)
    assert len(diagnostics) == 1
    assert list(diagnostics) == [diagnostic]
    assert diagnostics.of(ErrorCode.TYPE_MISMATCH) == [diagnostic]
    assert diagnostics.of(ErrorCode.NAME_NOT_FOUND) == []
    diagnostics.clear()
    assert len(diagnostics) == 0


def test_str():
    diagnostic = Diagnostic(ErrorCode.NAME_NOT_FOUND, "Undefined variable: y", 2, 7)
    assert str(diagnostic) == "2:7: Name not found: Undefined variable: y"


def test_report_without_collector_is_discarded():
    report(None, ErrorCode.SKIPPED_TOKEN, "ignored", 1, 1)
    tokens = tokenize("@ x")
    assert [t.value for t in tokens] == ['@', 'x', '']


def test_diagnostics_do_not_change_output():
    source = "x = 1\n@\ny = 'a' * x\nprint(x, y, z)\n"
    out, diagnostics = collect(source)
    assert out == "1\n"
    assert execute(source, io.StringIO()) == {'x': 1.0}
    assert diagnostics.codes() == [
        ErrorCode.UNKNOWN_CHARACTER,
        ErrorCode.SKIPPED_TOKEN,
        ErrorCode.TYPE_MISMATCH,
        ErrorCode.NAME_NOT_FOUND,
        ErrorCode.NAME_NOT_FOUND,
    ]


def test_positions_point_at_the_source():
    _, diagnostics = collect("x = 1\nprint(y)\n")
    [missing] = diagnostics
    assert (missing.line, missing.col) == (2, 7)

    _, diagnostics = collect("z = 'a' - 1")
    [mismatch] = diagnostics
    assert mismatch.code is ErrorCode.TYPE_MISMATCH
    assert (mismatch.line, mismatch.col) == (1, 9)


def test_loop_condition_mismatch_reported():
    _, diagnostics = collect("while 'forever':\n    print(1)\n")
    assert diagnostics.codes() == [ErrorCode.TYPE_MISMATCH]
