"""Driver runtime bundle threaded through both dispatchers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from compdrive.lib.commandline import DefaultCommandLineParser
from compdrive.lib.config.settings import DriverSettings
from compdrive.lib.config.tsconfig import JsonConfigLoader
from compdrive.lib.engine import EngineRegistry
from compdrive.lib.host import ProcessHost
from compdrive.lib.locale import DirectoryLocaleLoader
from compdrive.lib.performance import Performance
from compdrive.lib.sink import DiagnosticSink
from compdrive.lib.statistics import StatReporter

if TYPE_CHECKING:
    from typing import TextIO

    from compdrive.lib.ports import (
        CommandLineParser,
        CompilerEngine,
        ConfigLoader,
        LocaleLoader,
        System,
    )


@dataclass(frozen=True, slots=True)
class DriverRuntime:
    """Resolved collaborators for one driver invocation.

    `sink` and `stats` carry the only process-wide mutable state: the active
    diagnostic reporter and whether measure capture is on.
    """

    settings: DriverSettings
    host: System
    sink: DiagnosticSink
    stats: StatReporter
    parser: CommandLineParser
    config_loader: ConfigLoader
    locale_loader: LocaleLoader
    engine_factory: Callable[[], CompilerEngine]

    def create_engine(self) -> CompilerEngine:
        return self.engine_factory()


def build_runtime(
    settings: DriverSettings,
    *,
    host: System | None = None,
    registry: EngineRegistry | None = None,
    output_stream: TextIO | None = None,
) -> DriverRuntime:
    """Build the default runtime from settings and installed engines."""

    resolved_host: System = host or ProcessHost(
        output_stream=output_stream,
        new_line=settings.new_line,
    )
    performance = Performance()
    engines = registry or EngineRegistry.from_entry_points()
    locale_root = Path(settings.locale_dir).expanduser() if settings.locale_dir else None

    def _create_engine() -> CompilerEngine:
        return engines.create(resolved_host, performance, settings.engine)

    return DriverRuntime(
        settings=settings,
        host=resolved_host,
        sink=DiagnosticSink(resolved_host),
        stats=StatReporter(resolved_host, performance),
        parser=DefaultCommandLineParser(resolved_host),
        config_loader=JsonConfigLoader(resolved_host, settings.config_file_name),
        locale_loader=DirectoryLocaleLoader(locale_root),
        engine_factory=_create_engine,
    )
