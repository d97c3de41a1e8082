"""Diagnostic reporters and the process-wide active reporter slot."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from compdrive.lib.domain import BuildOptions, CompilerOptions, Diagnostic
    from compdrive.lib.ports import ErrorSummaryReporter, StatusReporter, System

_RESET = "\u001b[0m"
_GREY = "\u001b[90m"
_RED = "\u001b[91m"
_YELLOW = "\u001b[93m"
_BLUE = "\u001b[94m"
_CYAN = "\u001b[96m"

_CATEGORY_COLORS: dict[str, str] = {
    "error": _RED,
    "warning": _YELLOW,
    "suggestion": _GREY,
    "message": _BLUE,
}


def _location(diagnostic: Diagnostic, *, pretty: bool) -> str:
    if diagnostic.file_name is None:
        return ""
    if diagnostic.line is None:
        return f"{_CYAN}{diagnostic.file_name}{_RESET}" if pretty else diagnostic.file_name
    column = diagnostic.column or 1
    if pretty:
        return (
            f"{_CYAN}{diagnostic.file_name}{_RESET}:{_YELLOW}{diagnostic.line}{_RESET}"
            f":{_YELLOW}{column}{_RESET}"
        )
    return f"{diagnostic.file_name}({diagnostic.line},{column})"


def format_diagnostic(diagnostic: Diagnostic, new_line: str = "\n") -> str:
    """Plain one-line rendering: `file(line,col): error TS1234: text`."""

    location = _location(diagnostic, pretty=False)
    prefix = f"{location}: " if location else ""
    return (
        f"{prefix}{diagnostic.category} TS{diagnostic.code}: {diagnostic.message_text}{new_line}"
    )


def format_diagnostic_with_color(diagnostic: Diagnostic, new_line: str = "\n") -> str:
    """Pretty rendering with ANSI colours, followed by a blank line."""

    location = _location(diagnostic, pretty=True)
    prefix = f"{location} - " if location else ""
    color = _CATEGORY_COLORS.get(diagnostic.category, "")
    return (
        f"{prefix}{color}{diagnostic.category}{_RESET}{_GREY} TS{diagnostic.code}: {_RESET}"
        f"{diagnostic.message_text}{new_line}{new_line}"
    )


def error_summary_text(error_count: int, new_line: str = "\n") -> str:
    if error_count == 0:
        return ""
    noun = "error" if error_count == 1 else "errors"
    return f"{new_line}Found {error_count} {noun}.{new_line}{new_line}"


@dataclass(frozen=True, slots=True)
class DiagnosticReporter:
    """Writes diagnostics to the host output; prettiness is fixed for life."""

    host: System
    pretty: bool = False

    def __call__(self, diagnostic: Diagnostic) -> None:
        if self.pretty:
            self.host.write(format_diagnostic_with_color(diagnostic, self.host.new_line))
        else:
            self.host.write(format_diagnostic(diagnostic, self.host.new_line))


class DiagnosticSink:
    """Owns the single active reporter for one driver invocation.

    The sink starts with a provisional plain reporter so argument and config
    errors can be shown before options are known. Once the effective options
    are available `rebind` swaps in the final reporter. Earlier diagnostics
    are not replayed.
    """

    def __init__(self, host: System) -> None:
        self._host = host
        self._is_tty: bool | None = None
        self._reporter = self.create(pretty=False)

    @property
    def reporter(self) -> DiagnosticReporter:
        return self._reporter

    @property
    def pretty(self) -> bool:
        return self._reporter.pretty

    def create(self, pretty: bool) -> DiagnosticReporter:
        return DiagnosticReporter(host=self._host, pretty=pretty)

    def default_is_pretty(self) -> bool:
        if self._is_tty is None:
            probe = self._host.write_output_is_tty
            self._is_tty = bool(probe()) if probe is not None else False
        return self._is_tty

    def should_be_pretty(self, options: CompilerOptions | BuildOptions | None) -> bool:
        if options is None or options.pretty is None:
            return self.default_is_pretty()
        return bool(options.pretty)

    def rebind(self, options: CompilerOptions | BuildOptions | None) -> DiagnosticReporter:
        """Install a reporter matching `options` if prettiness changed."""

        pretty = self.should_be_pretty(options)
        if pretty != self._reporter.pretty:
            self._reporter = self.create(pretty)
        return self._reporter

    def report(self, diagnostic: Diagnostic) -> None:
        self._reporter(diagnostic)

    def report_all(self, diagnostics: tuple[Diagnostic, ...] | list[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self._reporter(diagnostic)

    def error_summary(
        self,
        options: CompilerOptions | BuildOptions | None,
    ) -> ErrorSummaryReporter | None:
        """Return an error-count summarizer in pretty mode, else `None`."""

        if not self.should_be_pretty(options):
            return None
        host = self._host

        def _report_error_summary(error_count: int) -> None:
            host.write(error_summary_text(error_count, host.new_line))

        return _report_error_summary

    def builder_status_reporter(self, pretty: bool) -> StatusReporter:
        host = self._host

        def _report_status(diagnostic: Diagnostic) -> None:
            if pretty:
                host.write(f"{_GREY}{_timestamp()}{_RESET} - {diagnostic.message_text}")
            else:
                host.write(f"{_timestamp()} - {diagnostic.message_text}")
            host.write(host.new_line * 2)

        return _report_status

    def watch_status_reporter(
        self,
        options: CompilerOptions | BuildOptions | None,
    ) -> StatusReporter:
        host = self._host
        pretty = self.should_be_pretty(options)

        def _report_watch_status(diagnostic: Diagnostic) -> None:
            stamp = f"[{_GREY}{_timestamp()}{_RESET}]" if pretty else f"[{_timestamp()}]"
            host.write(f"{stamp} {diagnostic.message_text}{host.new_line * 2}")

        return _report_watch_status


def _timestamp() -> str:
    return time.strftime("%H:%M:%S")
