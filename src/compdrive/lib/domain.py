"""Core frozen domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum, StrEnum
from typing import Literal

DiagnosticCategory = Literal["error", "warning", "message", "suggestion"]


class ExitStatus(IntEnum):
    """Process-level outcome codes."""

    SUCCESS = 0
    DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED = 1
    DIAGNOSTICS_PRESENT_OUTPUTS_GENERATED = 2
    INVALID_PROJECT_OUTPUTS_SKIPPED = 3
    PROJECT_REFERENCE_CYCLE_OUTPUTS_SKIPPED = 4


def exit_status(code: int) -> ExitStatus | int:
    """Name `code` when it is a known status; other collaborator codes pass through.

    >>> exit_status(2)
    <ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_GENERATED: 2>
    >>> exit_status(7)
    7
    """
    try:
        return ExitStatus(code)
    except ValueError:
        return code


class CommandKind(StrEnum):
    """Top-level command resolved from the first raw argument."""

    COMPILE = "compile"
    BUILD = "build"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One reportable error, warning or message."""

    code: int
    category: DiagnosticCategory
    message_text: str
    file_name: str | None = None
    line: int | None = None
    column: int | None = None


def _no_diagnostics() -> tuple[Diagnostic, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class CompilerOptions:
    """Closed set of recognized compiler options. `None` means unset."""

    all: bool | None = None
    build: bool | None = None
    help: bool | None = None
    init: bool | None = None
    version: bool | None = None
    locale: str | None = None
    project: str | None = None
    show_config: bool | None = None
    pretty: bool | None = None
    watch: bool | None = None
    preserve_watch_output: bool | None = None
    list_files: bool | None = None
    diagnostics: bool | None = None
    extended_diagnostics: bool | None = None
    incremental: bool | None = None
    composite: bool | None = None
    ts_build_info_file: str | None = None
    target: str | None = None
    module: str | None = None
    module_resolution: str | None = None
    lib: tuple[str, ...] | None = None
    jsx: str | None = None
    allow_js: bool | None = None
    check_js: bool | None = None
    declaration: bool | None = None
    source_map: bool | None = None
    out_file: str | None = None
    out_dir: str | None = None
    root_dir: str | None = None
    base_url: str | None = None
    no_emit: bool | None = None
    strict: bool | None = None
    no_implicit_any: bool | None = None
    config_file_path: str | None = None

    def merged_with(self, overrides: CompilerOptions) -> CompilerOptions:
        """Return a copy where every option set in `overrides` wins."""

        changes = {
            item.name: getattr(overrides, item.name)
            for item in fields(overrides)
            if getattr(overrides, item.name) is not None
        }
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Options accepted after `--build`."""

    help: bool | None = None
    watch: bool | None = None
    clean: bool | None = None
    verbose: bool | None = None
    dry: bool | None = None
    force: bool | None = None
    pretty: bool | None = None
    diagnostics: bool | None = None
    extended_diagnostics: bool | None = None
    locale: str | None = None
    preserve_watch_output: bool | None = None


@dataclass(frozen=True, slots=True)
class ProjectReference:
    """Reference from one project configuration to another."""

    path: str
    prepend: bool = False
    circular: bool = False


@dataclass(frozen=True, slots=True)
class ParsedCommandLine:
    """Options, root file names and parse errors of one command line."""

    options: CompilerOptions
    file_names: tuple[str, ...] = ()
    errors: tuple[Diagnostic, ...] = field(default_factory=_no_diagnostics)


@dataclass(frozen=True, slots=True)
class ConfigParseResult:
    """A configuration file merged with command-line overrides."""

    options: CompilerOptions
    config_file_path: str
    file_names: tuple[str, ...] = ()
    errors: tuple[Diagnostic, ...] = field(default_factory=_no_diagnostics)
    project_references: tuple[ProjectReference, ...] = ()
    raw: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ParsedBuildCommand:
    """Result of parsing arguments that followed `--build`."""

    build_options: BuildOptions
    projects: tuple[str, ...] = ()
    errors: tuple[Diagnostic, ...] = field(default_factory=_no_diagnostics)


@dataclass(frozen=True, slots=True)
class Statistic:
    """One row of the diagnostics statistics table."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class RelationCacheSizes:
    """Checker relation cache sizes reported under extended diagnostics."""

    assignable: int = 0
    identity: int = 0
    subtype: int = 0
