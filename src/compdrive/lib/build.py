"""Build-mode dispatch: solution build, build-watch and clean."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from compdrive.lib.domain import ExitStatus, exit_status
from compdrive.lib.help import print_help, print_version
from compdrive.lib.host import probe_capabilities
from compdrive.lib.locale import validate_locale_and_set_language
from compdrive.lib.messages import Messages, create_compiler_diagnostic
from compdrive.lib.options import BUILD_OPTION_DECLARATIONS

if TYPE_CHECKING:
    from compdrive.lib.ports import BuilderProgram, SolutionBuilderHost
    from compdrive.lib.runtime import DriverRuntime
    from compdrive.lib.statistics import StatReporter

logger = structlog.get_logger(__name__)

BUILD_HELP_PREFIX = "--build "


def _attach_statistics(builder_host: SolutionBuilderHost, stats: StatReporter) -> None:
    stats.instrument(builder_host)

    def _after_program_emit_and_diagnostics(builder_program: BuilderProgram) -> None:
        stats.report(builder_program.get_program())

    builder_host.after_program_emit_and_diagnostics = _after_program_emit_and_diagnostics


def perform_build(args: Sequence[str], runtime: DriverRuntime) -> ExitStatus | int | None:
    """Run a `--build` invocation. `None` means the builder is now watching."""

    host = runtime.host
    sink = runtime.sink
    parsed = runtime.parser.parse_build_command(args)
    build_options = parsed.build_options
    sink.rebind(build_options)

    errors = list(parsed.errors)
    if build_options.locale:
        validate_locale_and_set_language(build_options.locale, runtime.locale_loader, errors)

    if errors:
        sink.report_all(errors)
        return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED

    if build_options.help or not parsed.projects:
        print_version(host)
        print_help(host, BUILD_OPTION_DECLARATIONS, BUILD_HELP_PREFIX)
        return ExitStatus.SUCCESS

    capabilities = probe_capabilities(host)
    supported = capabilities.clean if build_options.clean else capabilities.build
    if not supported:
        logger.debug("host lacks build capability", clean=bool(build_options.clean))
        sink.report(create_compiler_diagnostic(Messages.HOST_DOES_NOT_SUPPORT_OPTION, "--build"))
        return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED

    pretty = sink.should_be_pretty(build_options)
    if build_options.watch:
        if not capabilities.watch:
            logger.debug("host lacks watch capability")
            sink.report(
                create_compiler_diagnostic(Messages.HOST_DOES_NOT_SUPPORT_OPTION, "--watch")
            )
            return ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED

        logger.debug("selected mode", mode="build-watch", projects=list(parsed.projects))
        engine = runtime.create_engine()
        watch_builder_host = engine.create_solution_builder_with_watch_host(
            sink.reporter,
            sink.builder_status_reporter(pretty),
            sink.watch_status_reporter(build_options),
        )
        _attach_statistics(watch_builder_host, runtime.stats)
        watch_builder = engine.create_solution_builder_with_watch(
            watch_builder_host, parsed.projects, build_options
        )
        watch_builder.build_all_projects()
        watch_builder.start_watching()
        return None

    mode = "clean" if build_options.clean else "build"
    logger.debug("selected mode", mode=mode, projects=list(parsed.projects))
    engine = runtime.create_engine()
    builder_host = engine.create_solution_builder_host(
        sink.reporter,
        sink.builder_status_reporter(pretty),
        sink.error_summary(build_options),
    )
    _attach_statistics(builder_host, runtime.stats)
    builder = engine.create_solution_builder(builder_host, parsed.projects, build_options)
    status = builder.clean_all_projects() if build_options.clean else builder.build_all_projects()
    return exit_status(status)
