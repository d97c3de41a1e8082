"""Collaborator protocol interfaces for dependency inversion.

The driver never parses, checks or emits source code itself. Everything it
needs from the compiler engine, the configuration layer and the host is
expressed here so that engines can be plugged in and tests can use fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from compdrive.lib.domain import Diagnostic

if TYPE_CHECKING:
    from compdrive.lib.domain import (
        BuildOptions,
        CompilerOptions,
        ConfigParseResult,
        ParsedBuildCommand,
        ParsedCommandLine,
        ProjectReference,
        RelationCacheSizes,
    )

DiagnosticReporter = Callable[[Diagnostic], None]
ErrorSummaryReporter = Callable[[int], None]
StatusReporter = Callable[[Diagnostic], None]
WriteFileName = Callable[[str], None]


class System(Protocol):
    """Process host. Optional capabilities are `None` when unsupported."""

    new_line: str
    write_output_is_tty: Callable[[], bool] | None
    get_modified_time: Callable[[str], float | None] | None
    set_modified_time: Callable[[str, float], None] | None
    delete_file: Callable[[str], None] | None
    watch_file: Callable[..., object] | None
    watch_directory: Callable[..., object] | None
    get_memory_usage: Callable[[], int] | None

    def write(self, text: str) -> None: ...

    def get_current_directory(self) -> str: ...

    def file_exists(self, path: str) -> bool: ...

    def directory_exists(self, path: str) -> bool: ...

    def read_file(self, path: str) -> str | None: ...

    def write_file(self, path: str, data: str) -> None: ...

    def get_executing_file_path(self) -> str: ...


class SourceFile(Protocol):
    @property
    def file_name(self) -> str: ...

    @property
    def line_starts(self) -> Sequence[int]: ...


class Program(Protocol):
    """Checked program handed back by the engine."""

    def get_compiler_options(self) -> CompilerOptions: ...

    def get_source_files(self) -> Sequence[SourceFile]: ...

    def get_node_count(self) -> int: ...

    def get_identifier_count(self) -> int: ...

    def get_symbol_count(self) -> int: ...

    def get_type_count(self) -> int: ...

    def get_relation_cache_sizes(self) -> RelationCacheSizes: ...


class BuilderProgram(Protocol):
    def get_program(self) -> Program: ...


CreateProgram = Callable[..., BuilderProgram]
AfterProgramHook = Callable[[BuilderProgram], None]


class WatchCompilerHost(Protocol):
    """Engine-owned host for one watch session."""

    create_program: CreateProgram
    after_program_create: AfterProgramHook | None
    config_file_parsing_result: ConfigParseResult | None


class SolutionBuilderHost(Protocol):
    """Engine-owned host for a solution build."""

    create_program: CreateProgram
    after_program_emit_and_diagnostics: AfterProgramHook | None


class SolutionBuilder(Protocol):
    def build_all_projects(self) -> int: ...

    def clean_all_projects(self) -> int: ...


class SolutionBuilderWithWatch(Protocol):
    def build_all_projects(self) -> int: ...

    def start_watching(self) -> None: ...


@dataclass(frozen=True, slots=True)
class ProgramRequest:
    """Inputs for creating one program."""

    root_names: tuple[str, ...]
    options: CompilerOptions
    project_references: tuple[ProjectReference, ...] | None = None
    config_file_parsing_diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class IncrementalCompilationRequest:
    """Inputs for one incremental compilation pass."""

    root_names: tuple[str, ...]
    options: CompilerOptions
    report_diagnostic: DiagnosticReporter
    after_program_emit_and_diagnostics: AfterProgramHook
    project_references: tuple[ProjectReference, ...] | None = None
    config_file_parsing_diagnostics: tuple[Diagnostic, ...] = ()
    report_error_summary: ErrorSummaryReporter | None = None


class CompilerEngine(Protocol):
    """Compilation pipeline, watch engine and solution builder."""

    def create_program(self, request: ProgramRequest) -> Program: ...

    def emit_files_and_report_errors(
        self,
        program: Program,
        report_diagnostic: DiagnosticReporter,
        write_file_name: WriteFileName,
        report_error_summary: ErrorSummaryReporter | None,
    ) -> int: ...

    def perform_incremental_compilation(self, request: IncrementalCompilationRequest) -> int: ...

    def create_watch_compiler_host_of_config_file(
        self,
        config_file_path: str,
        options_to_extend: CompilerOptions,
        report_diagnostic: DiagnosticReporter,
        report_watch_status: StatusReporter,
    ) -> WatchCompilerHost: ...

    def create_watch_compiler_host_of_files_and_compiler_options(
        self,
        root_files: tuple[str, ...],
        options: CompilerOptions,
        report_diagnostic: DiagnosticReporter,
        report_watch_status: StatusReporter,
    ) -> WatchCompilerHost: ...

    def create_watch_program(self, host: WatchCompilerHost) -> None: ...

    def create_solution_builder_host(
        self,
        report_diagnostic: DiagnosticReporter,
        report_solution_builder_status: StatusReporter,
        report_error_summary: ErrorSummaryReporter | None,
    ) -> SolutionBuilderHost: ...

    def create_solution_builder_with_watch_host(
        self,
        report_diagnostic: DiagnosticReporter,
        report_solution_builder_status: StatusReporter,
        report_watch_status: StatusReporter,
    ) -> SolutionBuilderHost: ...

    def create_solution_builder(
        self,
        host: SolutionBuilderHost,
        projects: tuple[str, ...],
        build_options: BuildOptions,
    ) -> SolutionBuilder: ...

    def create_solution_builder_with_watch(
        self,
        host: SolutionBuilderHost,
        projects: tuple[str, ...],
        build_options: BuildOptions,
    ) -> SolutionBuilderWithWatch: ...


class CommandLineParser(Protocol):
    def parse_command_line(self, args: Sequence[str]) -> ParsedCommandLine: ...

    def parse_build_command(self, args: Sequence[str]) -> ParsedBuildCommand: ...


class ConfigLoader(Protocol):
    """Configuration file discovery, parsing and serialization."""

    @property
    def config_file_name(self) -> str: ...

    def find_config_file(self, search_path: str) -> str | None: ...

    def parse_config_file(
        self,
        config_file_path: str,
        overrides: CompilerOptions,
    ) -> ConfigParseResult: ...

    def convert_to_config(
        self,
        parsed: ParsedCommandLine | ConfigParseResult,
        config_file_path: str,
    ) -> dict[str, object]: ...

    def generate_config(self, options: CompilerOptions, file_names: Sequence[str]) -> str: ...


class LocaleLoader(Protocol):
    def load_messages(self, language: str, territory: str | None) -> Mapping[int, str] | None: ...
