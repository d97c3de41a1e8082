"""Compilation statistics collection and aligned-table rendering."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from compdrive.lib.domain import Statistic
from compdrive.lib.formatting import pad_left, pad_right

if TYPE_CHECKING:
    from compdrive.lib.domain import BuildOptions, CompilerOptions
    from compdrive.lib.performance import Performance
    from compdrive.lib.ports import BuilderProgram, Program, System

# Parse time is the whole "Program" measure, so it also covers I/O read and
# reference resolution; emit time likewise covers I/O write. Kept that way so
# numbers stay comparable between releases.
_PARSE_MEASURE = "Program"
_BIND_MEASURE = "Bind"
_CHECK_MEASURE = "Check"
_EMIT_MEASURE = "Emit"
_IO_READ_MEASURE = "I/O Read"
_IO_WRITE_MEASURE = "I/O Write"


def statistics_requested(options: CompilerOptions | BuildOptions | None) -> bool:
    if options is None:
        return False
    return bool(options.diagnostics or options.extended_diagnostics)


def count_lines(program: Program) -> int:
    """Sum physical line starts over every source file of the program."""

    return sum(len(source_file.line_starts) for source_file in program.get_source_files())


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _hundredths_of_second(milliseconds: float) -> int:
    return _round_half_up(milliseconds / 10.0)


def format_seconds(hundredths: int) -> str:
    """Render hundredths of a second as `S.SSs`."""

    return f"{hundredths // 100}.{hundredths % 100:02d}s"


def format_memory(bytes_used: int) -> str:
    return f"{_round_half_up(bytes_used / 1000)}K"


def render_statistics(statistics: Sequence[Statistic], new_line: str = "\n") -> str:
    """Render rows with names padded to the widest name and values right-aligned.

    >>> render_statistics([Statistic("Files", "3"), Statistic("Lines", "120")])
    'Files:   3\\nLines: 120\\n'
    """
    name_width = 0
    value_width = 0
    for statistic in statistics:
        name_width = max(name_width, len(statistic.name))
        value_width = max(value_width, len(statistic.value))

    return "".join(
        pad_right(f"{statistic.name}:", name_width + 2)
        + pad_left(statistic.value, value_width)
        + new_line
        for statistic in statistics
    )


class StatReporter:
    """Collects per-program statistics when diagnostics output is requested."""

    def __init__(self, host: System, performance: Performance) -> None:
        self._host = host
        self._performance = performance

    @property
    def performance(self) -> Performance:
        return self._performance

    def enable(self, options: CompilerOptions | BuildOptions | None) -> bool:
        """Turn on measure capture if `options` asks for diagnostics."""

        if statistics_requested(options):
            self._performance.enable()
        return self._performance.enabled

    def disable(self) -> None:
        self._performance.disable()

    @contextmanager
    def session(self, options: CompilerOptions | BuildOptions | None) -> Iterator[bool]:
        """Scope capture to one compilation; always disabled on exit."""

        enabled = self.enable(options)
        try:
            yield enabled
        finally:
            self.disable()

    def collect(self, program: Program) -> list[Statistic]:
        options = program.get_compiler_options()
        statistics: list[Statistic] = []

        def count(name: str, value: int) -> None:
            statistics.append(Statistic(name, str(value)))

        def timing(name: str, milliseconds: float) -> None:
            statistics.append(Statistic(name, format_seconds(_hundredths_of_second(milliseconds))))

        probe = self._host.get_memory_usage
        memory_used = probe() if probe is not None else -1

        count("Files", len(program.get_source_files()))
        count("Lines", count_lines(program))
        count("Nodes", program.get_node_count())
        count("Identifiers", program.get_identifier_count())
        count("Symbols", program.get_symbol_count())
        count("Types", program.get_type_count())

        if memory_used >= 0:
            statistics.append(Statistic("Memory used", format_memory(memory_used)))

        performance = self._performance
        component_times = (
            performance.get_duration(_PARSE_MEASURE),
            performance.get_duration(_BIND_MEASURE),
            performance.get_duration(_CHECK_MEASURE),
            performance.get_duration(_EMIT_MEASURE),
        )
        if options.extended_diagnostics:
            caches = program.get_relation_cache_sizes()
            count("Assignability cache size", caches.assignable)
            count("Identity cache size", caches.identity)
            count("Subtype cache size", caches.subtype)
            performance.for_each_measure(lambda name, duration: timing(f"{name} time", duration))
        else:
            timing("I/O read", performance.get_duration(_IO_READ_MEASURE))
            timing("I/O write", performance.get_duration(_IO_WRITE_MEASURE))
            timing("Parse time", component_times[0])
            timing("Bind time", component_times[1])
            timing("Check time", component_times[2])
            timing("Emit time", component_times[3])

        total = sum(_hundredths_of_second(duration) for duration in component_times)
        statistics.append(Statistic("Total time", format_seconds(total)))
        return statistics

    def render(self, statistics: Sequence[Statistic]) -> str:
        return render_statistics(statistics, self._host.new_line)

    def report(self, program: Program) -> None:
        """Write the statistics table for `program`, then stop capturing."""

        if not statistics_requested(program.get_compiler_options()):
            return
        try:
            statistics = self.collect(program)
            self._host.write(self.render(statistics))
        finally:
            self._performance.disable()

    def instrument(self, host: Any) -> None:
        """Wrap `host.create_program` so each new program turns capture on.

        `host` is any engine-owned watch or solution-builder host.
        """
        create_program = host.create_program

        def _create_program(
            root_names: Sequence[str] | None = None,
            options: CompilerOptions | None = None,
            *args: Any,
            **kwargs: Any,
        ) -> BuilderProgram:
            if options is not None:
                self.enable(options)
            return create_program(root_names, options, *args, **kwargs)

        host.create_program = _create_program
