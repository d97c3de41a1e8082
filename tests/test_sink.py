"""Diagnostic reporter selection and rendering tests."""

from __future__ import annotations

import re
from pathlib import Path

from fakes import RecordingHost

from compdrive.lib.domain import BuildOptions, CompilerOptions, Diagnostic
from compdrive.lib.sink import (
    DiagnosticSink,
    error_summary_text,
    format_diagnostic,
    format_diagnostic_with_color,
)

_ANSI = re.compile(r"\x1b\[[0-9;]*m")

_LOCATED = Diagnostic(2304, "error", "Cannot find name 'x'.", "src/a.ts", 3, 5)
_GLOBAL = Diagnostic(5023, "error", "Unknown compiler option '--bogus'.")


def test_format_diagnostic_plain_with_location() -> None:
    assert format_diagnostic(_LOCATED) == "src/a.ts(3,5): error TS2304: Cannot find name 'x'.\n"


def test_format_diagnostic_plain_without_location() -> None:
    assert format_diagnostic(_GLOBAL, "\r\n") == (
        "error TS5023: Unknown compiler option '--bogus'.\r\n"
    )


def test_format_diagnostic_with_color_strips_to_pretty_layout() -> None:
    rendered = format_diagnostic_with_color(_LOCATED)

    assert "\x1b[" in rendered
    assert _ANSI.sub("", rendered) == "src/a.ts:3:5 - error TS2304: Cannot find name 'x'.\n\n"


def test_error_summary_text_pluralizes() -> None:
    assert error_summary_text(0) == ""
    assert error_summary_text(1) == "\nFound 1 error.\n\n"
    assert error_summary_text(3) == "\nFound 3 errors.\n\n"


def test_sink_starts_plain(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=True)
    sink = DiagnosticSink(host)

    sink.report(_GLOBAL)

    assert not sink.pretty
    assert host.output == "error TS5023: Unknown compiler option '--bogus'.\n"
    assert host.tty_probes == 0


def test_rebind_follows_terminal_when_pretty_unset(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=True)
    sink = DiagnosticSink(host)

    sink.rebind(CompilerOptions())

    assert sink.pretty


def test_rebind_explicit_pretty_wins_over_terminal(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=True)
    sink = DiagnosticSink(host)

    sink.rebind(CompilerOptions(pretty=False))
    assert not sink.pretty

    sink.rebind(BuildOptions(pretty=True))
    assert sink.pretty


def test_rebind_without_terminal_probe_is_plain(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=None)
    sink = DiagnosticSink(host)

    sink.rebind(CompilerOptions())

    assert not sink.pretty


def test_rebind_replaces_reporter_only_when_prettiness_changes(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=False)
    sink = DiagnosticSink(host)
    provisional = sink.reporter

    assert sink.rebind(CompilerOptions()) is provisional
    pretty = sink.rebind(CompilerOptions(pretty=True))
    assert pretty is not provisional
    assert sink.rebind(CompilerOptions(pretty=True)) is pretty
    assert not sink.rebind(CompilerOptions(pretty=False)).pretty


def test_terminal_probed_once(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=True)
    sink = DiagnosticSink(host)

    sink.rebind(CompilerOptions())
    sink.rebind(None)
    sink.error_summary(None)

    assert host.tty_probes == 1


def test_earlier_diagnostics_are_not_replayed(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path)
    sink = DiagnosticSink(host)
    sink.report(_GLOBAL)

    sink.rebind(CompilerOptions(pretty=True))
    sink.report(_LOCATED)

    plain, pretty = host.chunks
    assert plain == "error TS5023: Unknown compiler option '--bogus'.\n"
    assert _ANSI.sub("", pretty).startswith("src/a.ts:3:5 - error TS2304")


def test_error_summary_only_in_pretty_mode(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path, tty=False)
    sink = DiagnosticSink(host)

    assert sink.error_summary(CompilerOptions()) is None

    summary = sink.error_summary(CompilerOptions(pretty=True))
    assert summary is not None
    summary(2)
    assert host.output == "\nFound 2 errors.\n\n"


def test_watch_status_reporter_prefixes_clock(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path)
    sink = DiagnosticSink(host)

    sink.watch_status_reporter(CompilerOptions())(
        Diagnostic(6031, "message", "Starting compilation in watch mode...")
    )

    assert re.fullmatch(
        r"\[\d\d:\d\d:\d\d\] Starting compilation in watch mode\.\.\.\n\n", host.output
    )


def test_builder_status_reporter_plain(tmp_path: Path) -> None:
    host = RecordingHost(tmp_path)
    sink = DiagnosticSink(host)

    sink.builder_status_reporter(pretty=False)(
        Diagnostic(6362, "message", "Projects in this build: a")
    )

    assert re.fullmatch(r"\d\d:\d\d:\d\d - Projects in this build: a\n\n", host.output)
