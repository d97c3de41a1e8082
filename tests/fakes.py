"""Fake hosts, programs and compiler engines for driver tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from compdrive.lib.commandline import DefaultCommandLineParser
from compdrive.lib.config.settings import DriverSettings
from compdrive.lib.config.tsconfig import JsonConfigLoader
from compdrive.lib.domain import (
    BuildOptions,
    CompilerOptions,
    Diagnostic,
    RelationCacheSizes,
)
from compdrive.lib.locale import DirectoryLocaleLoader
from compdrive.lib.performance import Performance
from compdrive.lib.ports import IncrementalCompilationRequest, ProgramRequest
from compdrive.lib.runtime import DriverRuntime
from compdrive.lib.sink import DiagnosticSink
from compdrive.lib.statistics import StatReporter


class RecordingHost:
    """Filesystem-backed host that records output and toggles capabilities."""

    def __init__(
        self,
        root: Path,
        *,
        tty: bool | None = False,
        modified_time: bool = True,
        delete: bool = True,
        watch: bool = True,
        memory_usage: int | None = None,
        new_line: str = "\n",
    ) -> None:
        self.root = root
        self.new_line = new_line
        self.chunks: list[str] = []
        self.tty_probes = 0
        self.watched: list[str] = []
        self.write_output_is_tty: Callable[[], bool] | None = (
            None if tty is None else self._tty_probe(tty)
        )
        self.get_modified_time: Callable[[str], float | None] | None = (
            self._get_modified_time if modified_time else None
        )
        self.set_modified_time: Callable[[str, float], None] | None = (
            self._set_modified_time if modified_time else None
        )
        self.delete_file: Callable[[str], None] | None = self._delete_file if delete else None
        self.watch_file: Callable[..., object] | None = self._watch if watch else None
        self.watch_directory: Callable[..., object] | None = self._watch if watch else None
        self.get_memory_usage: Callable[[], int] | None = (
            (lambda: memory_usage) if memory_usage is not None else None
        )

    @property
    def output(self) -> str:
        return "".join(self.chunks)

    def write(self, text: str) -> None:
        self.chunks.append(text)

    def get_current_directory(self) -> str:
        return self.root.as_posix()

    def get_executing_file_path(self) -> str:
        return (self.root / "compdrive").as_posix()

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def directory_exists(self, path: str) -> bool:
        return Path(path).is_dir()

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError):
            return None

    def write_file(self, path: str, data: str) -> None:
        Path(path).write_text(data, encoding="utf-8")

    def _tty_probe(self, value: bool) -> Callable[[], bool]:
        def _probe() -> bool:
            self.tty_probes += 1
            return value

        return _probe

    def _get_modified_time(self, path: str) -> float | None:
        target = Path(path)
        return target.stat().st_mtime if target.exists() else None

    def _set_modified_time(self, path: str, timestamp: float) -> None:
        del path, timestamp

    def _delete_file(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)

    def _watch(self, path: str, *args: object, **kwargs: object) -> None:
        del args, kwargs
        self.watched.append(path)


@dataclass(frozen=True)
class FakeSourceFile:
    file_name: str
    line_starts: tuple[int, ...]


@dataclass
class FakeProgram:
    options: CompilerOptions
    source_files: list[FakeSourceFile] = field(default_factory=list)
    node_count: int = 0
    identifier_count: int = 0
    symbol_count: int = 0
    type_count: int = 0
    caches: RelationCacheSizes = field(default_factory=RelationCacheSizes)

    def get_compiler_options(self) -> CompilerOptions:
        return self.options

    def get_source_files(self) -> list[FakeSourceFile]:
        return self.source_files

    def get_node_count(self) -> int:
        return self.node_count

    def get_identifier_count(self) -> int:
        return self.identifier_count

    def get_symbol_count(self) -> int:
        return self.symbol_count

    def get_type_count(self) -> int:
        return self.type_count

    def get_relation_cache_sizes(self) -> RelationCacheSizes:
        return self.caches


@dataclass
class FakeBuilderProgram:
    program: FakeProgram

    def get_program(self) -> FakeProgram:
        return self.program


@dataclass
class FakeWatchHost:
    create_program: Callable[..., FakeBuilderProgram]
    options: CompilerOptions
    root_files: tuple[str, ...] = ()
    after_program_create: Callable[[FakeBuilderProgram], None] | None = None
    config_file_parsing_result: object | None = None


@dataclass
class FakeSolutionBuilderHost:
    create_program: Callable[..., FakeBuilderProgram]
    after_program_emit_and_diagnostics: Callable[[FakeBuilderProgram], None] | None = None


@dataclass
class FakeSolutionBuilder:
    engine: FakeEngine
    host: FakeSolutionBuilderHost
    projects: tuple[str, ...]
    build_options: BuildOptions

    def build_all_projects(self) -> int:
        self.engine.calls.append("build_all_projects")
        options = CompilerOptions(
            diagnostics=self.build_options.diagnostics,
            extended_diagnostics=self.build_options.extended_diagnostics,
        )
        builder_program = self.host.create_program(self.projects, options)
        if self.host.after_program_emit_and_diagnostics is not None:
            self.host.after_program_emit_and_diagnostics(builder_program)
        return self.engine.status

    def clean_all_projects(self) -> int:
        self.engine.calls.append("clean_all_projects")
        return self.engine.status

    def start_watching(self) -> None:
        self.engine.calls.append("start_watching")


# Durations (milliseconds) recorded for every program the fake engine creates.
PROGRAM_DURATIONS: dict[str, float] = {
    "Program": 1234.0,
    "Bind": 100.0,
    "Check": 200.0,
}
EMIT_DURATION = 50.0


class FakeEngine:
    """Compiler engine double that records calls and timing measures."""

    def __init__(
        self,
        performance: Performance,
        *,
        status: int = 0,
        diagnostics: Sequence[Diagnostic] = (),
    ) -> None:
        self.performance = performance
        self.status = status
        self.diagnostics = tuple(diagnostics)
        self.calls: list[str] = []
        self.program_requests: list[ProgramRequest] = []
        self.incremental_requests: list[IncrementalCompilationRequest] = []
        self.watch_hosts: list[FakeWatchHost] = []
        self.builder_hosts: list[FakeSolutionBuilderHost] = []
        self.builders: list[FakeSolutionBuilder] = []
        self.reporters: dict[str, object] = {}

    def make_program(self, options: CompilerOptions) -> FakeProgram:
        for name, duration in PROGRAM_DURATIONS.items():
            self.performance.add_duration(name, duration)
        return FakeProgram(
            options=options,
            source_files=[FakeSourceFile("/src/a.ts", (0, 10, 20))],
            node_count=42,
            identifier_count=7,
            symbol_count=5,
            type_count=3,
        )

    def create_builder_program(
        self,
        root_names: Sequence[str] | None = None,
        options: CompilerOptions | None = None,
        *args: object,
    ) -> FakeBuilderProgram:
        del root_names, args
        self.calls.append("create_builder_program")
        return FakeBuilderProgram(self.make_program(options or CompilerOptions()))

    def create_program(self, request: ProgramRequest) -> FakeProgram:
        self.calls.append("create_program")
        self.program_requests.append(request)
        return self.make_program(request.options)

    def emit_files_and_report_errors(
        self,
        program: FakeProgram,
        report_diagnostic: Callable[[Diagnostic], None],
        write_file_name: Callable[[str], None],
        report_error_summary: Callable[[int], None] | None,
    ) -> int:
        self.calls.append("emit_files_and_report_errors")
        self.reporters["error_summary"] = report_error_summary
        self.performance.add_duration("Emit", EMIT_DURATION)
        for diagnostic in self.diagnostics:
            report_diagnostic(diagnostic)
        if program.options.list_files:
            for source_file in program.source_files:
                write_file_name(source_file.file_name)
        if report_error_summary is not None:
            report_error_summary(len(self.diagnostics))
        return self.status

    def perform_incremental_compilation(self, request: IncrementalCompilationRequest) -> int:
        self.calls.append("perform_incremental_compilation")
        self.incremental_requests.append(request)
        program = self.make_program(request.options)
        self.performance.add_duration("Emit", EMIT_DURATION)
        request.after_program_emit_and_diagnostics(FakeBuilderProgram(program))
        return self.status

    def create_watch_compiler_host_of_config_file(
        self,
        config_file_path: str,
        options_to_extend: CompilerOptions,
        report_diagnostic: Callable[[Diagnostic], None],
        report_watch_status: Callable[[Diagnostic], None],
    ) -> FakeWatchHost:
        self.calls.append("create_watch_compiler_host_of_config_file")
        self.reporters["watch_status"] = report_watch_status
        host = FakeWatchHost(
            create_program=self.create_builder_program,
            options=options_to_extend,
            root_files=(config_file_path,),
        )
        self.watch_hosts.append(host)
        return host

    def create_watch_compiler_host_of_files_and_compiler_options(
        self,
        root_files: tuple[str, ...],
        options: CompilerOptions,
        report_diagnostic: Callable[[Diagnostic], None],
        report_watch_status: Callable[[Diagnostic], None],
    ) -> FakeWatchHost:
        self.calls.append("create_watch_compiler_host_of_files_and_compiler_options")
        self.reporters["watch_status"] = report_watch_status
        host = FakeWatchHost(
            create_program=self.create_builder_program,
            options=options,
            root_files=root_files,
        )
        self.watch_hosts.append(host)
        return host

    def create_watch_program(self, host: FakeWatchHost) -> None:
        self.calls.append("create_watch_program")
        builder_program = host.create_program(host.root_files, host.options)
        if host.after_program_create is not None:
            host.after_program_create(builder_program)

    def create_solution_builder_host(
        self,
        report_diagnostic: Callable[[Diagnostic], None],
        report_solution_builder_status: Callable[[Diagnostic], None],
        report_error_summary: Callable[[int], None] | None,
    ) -> FakeSolutionBuilderHost:
        self.calls.append("create_solution_builder_host")
        self.reporters["error_summary"] = report_error_summary
        host = FakeSolutionBuilderHost(create_program=self.create_builder_program)
        self.builder_hosts.append(host)
        return host

    def create_solution_builder_with_watch_host(
        self,
        report_diagnostic: Callable[[Diagnostic], None],
        report_solution_builder_status: Callable[[Diagnostic], None],
        report_watch_status: Callable[[Diagnostic], None],
    ) -> FakeSolutionBuilderHost:
        self.calls.append("create_solution_builder_with_watch_host")
        self.reporters["watch_status"] = report_watch_status
        host = FakeSolutionBuilderHost(create_program=self.create_builder_program)
        self.builder_hosts.append(host)
        return host

    def create_solution_builder(
        self,
        host: FakeSolutionBuilderHost,
        projects: tuple[str, ...],
        build_options: BuildOptions,
    ) -> FakeSolutionBuilder:
        self.calls.append("create_solution_builder")
        builder = FakeSolutionBuilder(self, host, projects, build_options)
        self.builders.append(builder)
        return builder

    def create_solution_builder_with_watch(
        self,
        host: FakeSolutionBuilderHost,
        projects: tuple[str, ...],
        build_options: BuildOptions,
    ) -> FakeSolutionBuilder:
        self.calls.append("create_solution_builder_with_watch")
        builder = FakeSolutionBuilder(self, host, projects, build_options)
        self.builders.append(builder)
        return builder


@dataclass
class DriverHarness:
    runtime: DriverRuntime
    host: RecordingHost
    engine: FakeEngine


def make_harness(
    host: RecordingHost,
    *,
    status: int = 0,
    diagnostics: Sequence[Diagnostic] = (),
    locale_root: Path | None = None,
    settings: DriverSettings | None = None,
) -> DriverHarness:
    resolved_settings = settings or DriverSettings()
    performance = Performance()
    engine = FakeEngine(performance, status=status, diagnostics=diagnostics)
    runtime = DriverRuntime(
        settings=resolved_settings,
        host=host,
        sink=DiagnosticSink(host),
        stats=StatReporter(host, performance),
        parser=DefaultCommandLineParser(host),
        config_loader=JsonConfigLoader(host, resolved_settings.config_file_name),
        locale_loader=DirectoryLocaleLoader(locale_root),
        engine_factory=lambda: engine,
    )
    return DriverHarness(runtime=runtime, host=host, engine=engine)
