"""Mode resolution for ordinary compiler invocations.

`execute_command_line` walks a fixed precedence list: build redirect, early
argument errors, init, version, help, project resolution, config discovery,
config dump, then watch / incremental / single compile. The first matching
step decides the mode and its exit status.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from compdrive.lib.build import perform_build
from compdrive.lib.config.tsconfig import combine_paths, normalize_path
from compdrive.lib.domain import (
    CommandKind,
    ConfigParseResult,
    ExitStatus,
    ParsedCommandLine,
    exit_status,
)
from compdrive.lib.help import print_help, print_version
from compdrive.lib.locale import validate_locale_and_set_language
from compdrive.lib.messages import Messages, create_compiler_diagnostic
from compdrive.lib.options import options_for_help
from compdrive.lib.ports import IncrementalCompilationRequest, ProgramRequest

if TYPE_CHECKING:
    from compdrive.lib.domain import CompilerOptions, Diagnostic, ProjectReference
    from compdrive.lib.ports import (
        BuilderProgram,
        DiagnosticReporter,
        WatchCompilerHost,
    )
    from compdrive.lib.runtime import DriverRuntime
    from compdrive.lib.statistics import StatReporter

logger = structlog.get_logger(__name__)

_BUILD_SWITCHES = frozenset({"build", "b"})


def classify_command(args: Sequence[str]) -> tuple[CommandKind, list[str]]:
    """Split off a leading `--build` / `-b` switch.

    >>> classify_command(["-B", "proj"])
    (<CommandKind.BUILD: 'build'>, ['proj'])
    >>> classify_command(["main.ts", "--build"])
    (<CommandKind.COMPILE: 'compile'>, ['main.ts', '--build'])
    """
    if args:
        first = args[0]
        if first.startswith("-"):
            switch = first[2:] if first.startswith("--") else first[1:]
            if switch.lower() in _BUILD_SWITCHES:
                return CommandKind.BUILD, list(args[1:])
    return CommandKind.COMPILE, list(args)


def execute_command_line(
    args: Sequence[str],
    runtime: DriverRuntime,
) -> ExitStatus | int | None:
    """Run one invocation. `None` means control was handed to a watch engine."""

    kind, remaining = classify_command(args)
    if kind is CommandKind.BUILD:
        return perform_build(remaining, runtime)

    host = runtime.host
    sink = runtime.sink
    command_line = runtime.parser.parse_command_line(remaining)
    options = command_line.options

    if options.build:
        sink.report(create_compiler_diagnostic(Messages.BUILD_MUST_BE_FIRST_ARGUMENT))
        return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED

    errors = list(command_line.errors)
    if options.locale:
        validate_locale_and_set_language(options.locale, runtime.locale_loader, errors)

    if errors:
        sink.report_all(errors)
        return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED

    if options.init:
        _write_config_file(runtime, command_line)
        return ExitStatus.SUCCESS

    if options.version:
        print_version(host)
        return ExitStatus.SUCCESS

    if options.help or options.all:
        _print_version_and_help(runtime, options)
        return ExitStatus.SUCCESS

    config_file_name: str | None = None
    if options.project:
        if command_line.file_names:
            sink.report(
                create_compiler_diagnostic(Messages.PROJECT_CANNOT_BE_MIXED_WITH_SOURCE_FILES)
            )
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
        config_file_name = _resolve_project(runtime, options.project)
        if config_file_name is None:
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    elif not command_line.file_names:
        search_path = normalize_path(host.get_current_directory()) or "."
        config_file_name = runtime.config_loader.find_config_file(search_path)

    if not command_line.file_names and config_file_name is None:
        _print_version_and_help(runtime, options)
        return ExitStatus.SUCCESS

    if config_file_name is not None:
        return _run_with_config(runtime, command_line, config_file_name)
    return _run_without_config(runtime, command_line)


def _resolve_project(runtime: DriverRuntime, project: str) -> str | None:
    """Map `--project` to a config file path, reporting when it is missing."""

    host = runtime.host
    loader = runtime.config_loader
    file_or_directory = normalize_path(project)
    if not file_or_directory or host.directory_exists(file_or_directory):
        config_file_name = combine_paths(file_or_directory, loader.config_file_name)
        if not host.file_exists(config_file_name):
            runtime.sink.report(
                create_compiler_diagnostic(
                    Messages.CANNOT_FIND_CONFIG_IN_DIRECTORY, loader.config_file_name, project
                )
            )
            return None
        return config_file_name

    if not host.file_exists(file_or_directory):
        runtime.sink.report(
            create_compiler_diagnostic(Messages.SPECIFIED_PATH_DOES_NOT_EXIST, project)
        )
        return None
    return file_or_directory


def _run_with_config(
    runtime: DriverRuntime,
    command_line: ParsedCommandLine,
    config_file_name: str,
) -> ExitStatus | int | None:
    sink = runtime.sink
    config = runtime.config_loader.parse_config_file(config_file_name, command_line.options)

    if command_line.options.show_config:
        if config.errors:
            sink.rebind(config.options)
            sink.report_all(config.errors)
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
        _write_json(runtime, runtime.config_loader.convert_to_config(config, config_file_name))
        return ExitStatus.SUCCESS

    sink.rebind(config.options)
    if config.options.watch:
        if not _host_supports_watch(runtime):
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
        logger.debug("selected mode", mode="watch", config=config_file_name)
        engine = runtime.create_engine()
        watch_host = engine.create_watch_compiler_host_of_config_file(
            config_file_name,
            command_line.options,
            sink.reporter,
            sink.watch_status_reporter(config.options),
        )
        _instrument_watch_host(watch_host, runtime.stats)
        watch_host.config_file_parsing_result = config
        engine.create_watch_program(watch_host)
        return None

    if _is_incremental(config.options):
        logger.debug("selected mode", mode="incremental", config=config_file_name)
        return _perform_incremental_compilation(runtime, config)

    logger.debug(
        "selected mode", mode="compile", config=config_file_name, files=len(config.file_names)
    )
    return _perform_compilation(runtime, config)


def _run_without_config(
    runtime: DriverRuntime,
    command_line: ParsedCommandLine,
) -> ExitStatus | int | None:
    host = runtime.host
    sink = runtime.sink
    options = command_line.options

    if options.show_config:
        config_path = combine_paths(
            normalize_path(host.get_current_directory()),
            runtime.config_loader.config_file_name,
        )
        _write_json(runtime, runtime.config_loader.convert_to_config(command_line, config_path))
        return ExitStatus.SUCCESS

    sink.rebind(options)
    if options.watch:
        if not _host_supports_watch(runtime):
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
        logger.debug("selected mode", mode="watch", files=len(command_line.file_names))
        engine = runtime.create_engine()
        watch_host = engine.create_watch_compiler_host_of_files_and_compiler_options(
            command_line.file_names,
            options,
            sink.reporter,
            sink.watch_status_reporter(options),
        )
        _instrument_watch_host(watch_host, runtime.stats)
        engine.create_watch_program(watch_host)
        return None

    if _is_incremental(options):
        logger.debug("selected mode", mode="incremental", files=len(command_line.file_names))
        return _perform_incremental_compilation(runtime, command_line)

    logger.debug("selected mode", mode="compile", files=len(command_line.file_names))
    return _perform_compilation(runtime, command_line)


def _is_incremental(options: CompilerOptions) -> bool:
    return bool(options.incremental or options.composite)


def _host_supports_watch(runtime: DriverRuntime) -> bool:
    host = runtime.host
    if host.watch_file is not None and host.watch_directory is not None:
        return True
    logger.debug("host lacks watch capability")
    runtime.sink.report(
        create_compiler_diagnostic(Messages.HOST_DOES_NOT_SUPPORT_OPTION, "--watch")
    )
    return False


def _project_inputs(
    parsed: ParsedCommandLine | ConfigParseResult,
) -> tuple[tuple[ProjectReference, ...] | None, tuple[Diagnostic, ...]]:
    if isinstance(parsed, ConfigParseResult):
        return parsed.project_references, parsed.errors
    return None, ()


def _perform_compilation(
    runtime: DriverRuntime,
    parsed: ParsedCommandLine | ConfigParseResult,
) -> ExitStatus | int:
    host = runtime.host
    sink = runtime.sink
    options = parsed.options
    project_references, parsing_diagnostics = _project_inputs(parsed)
    engine = runtime.create_engine()

    with runtime.stats.session(options):
        program = engine.create_program(
            ProgramRequest(
                root_names=parsed.file_names,
                options=options,
                project_references=project_references,
                config_file_parsing_diagnostics=parsing_diagnostics,
            )
        )
        status = engine.emit_files_and_report_errors(
            program,
            sink.reporter,
            lambda text: host.write(text + host.new_line),
            sink.error_summary(options),
        )
        runtime.stats.report(program)
    return exit_status(status)


def _perform_incremental_compilation(
    runtime: DriverRuntime,
    parsed: ParsedCommandLine | ConfigParseResult,
) -> ExitStatus | int:
    sink = runtime.sink
    stats = runtime.stats
    options = parsed.options
    project_references, parsing_diagnostics = _project_inputs(parsed)
    engine = runtime.create_engine()

    def _after_emit(builder_program: BuilderProgram) -> None:
        stats.report(builder_program.get_program())

    with stats.session(options):
        status = engine.perform_incremental_compilation(
            IncrementalCompilationRequest(
                root_names=parsed.file_names,
                options=options,
                report_diagnostic=sink.reporter,
                after_program_emit_and_diagnostics=_after_emit,
                project_references=project_references,
                config_file_parsing_diagnostics=parsing_diagnostics,
                report_error_summary=sink.error_summary(options),
            )
        )
    return exit_status(status)


def _instrument_watch_host(watch_host: WatchCompilerHost, stats: StatReporter) -> None:
    stats.instrument(watch_host)
    after_program_create = watch_host.after_program_create

    def _after_program_create(builder_program: BuilderProgram) -> None:
        if after_program_create is not None:
            after_program_create(builder_program)
        stats.report(builder_program.get_program())

    watch_host.after_program_create = _after_program_create


def _write_json(runtime: DriverRuntime, payload: dict[str, object]) -> None:
    runtime.host.write(json.dumps(payload, indent=4) + runtime.host.new_line)


def _print_version_and_help(runtime: DriverRuntime, options: CompilerOptions) -> None:
    print_version(runtime.host)
    print_help(runtime.host, options_for_help(show_all=bool(options.all)))


def _write_config_file(runtime: DriverRuntime, command_line: ParsedCommandLine) -> None:
    host = runtime.host
    loader = runtime.config_loader
    current_directory = normalize_path(host.get_current_directory())
    file_path = combine_paths(current_directory, loader.config_file_name)
    report: DiagnosticReporter = runtime.sink.reporter

    if host.file_exists(file_path):
        report(
            create_compiler_diagnostic(
                Messages.CONFIG_ALREADY_DEFINED, loader.config_file_name, file_path
            )
        )
        return

    content = loader.generate_config(command_line.options, command_line.file_names)
    host.write_file(file_path, content)
    report(
        create_compiler_diagnostic(Messages.SUCCESSFULLY_CREATED_CONFIG, loader.config_file_name)
    )

