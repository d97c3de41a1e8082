"""Build, build-watch and clean dispatch tests."""

from __future__ import annotations

import re
from pathlib import Path

import pytest
from fakes import DriverHarness, RecordingHost, make_harness

from compdrive import __version__
from compdrive.lib.build import perform_build
from compdrive.lib.domain import BuildOptions, ExitStatus

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def _harness(tmp_path: Path, *, status: int = 0, **host_kwargs: bool) -> DriverHarness:
    return make_harness(RecordingHost(tmp_path, **host_kwargs), status=status)


def test_build_defaults_to_current_directory(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    status = perform_build([], harness.runtime)

    assert status == ExitStatus.SUCCESS
    assert harness.engine.calls == [
        "create_solution_builder_host",
        "create_solution_builder",
        "build_all_projects",
        "create_builder_program",
    ]
    assert harness.engine.builders[0].projects == (".",)


def test_build_passes_projects_and_options(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    perform_build(["app", "lib", "--verbose", "--force"], harness.runtime)

    builder = harness.engine.builders[0]
    assert builder.projects == ("app", "lib")
    assert builder.build_options == BuildOptions(verbose=True, force=True)


def test_build_forwards_builder_status(tmp_path: Path) -> None:
    harness = _harness(tmp_path, status=int(ExitStatus.PROJECT_REFERENCE_CYCLE_OUTPUTS_SKIPPED))

    status = perform_build(["app"], harness.runtime)

    assert status == ExitStatus.PROJECT_REFERENCE_CYCLE_OUTPUTS_SKIPPED


def test_build_passes_through_builder_defined_status(tmp_path: Path) -> None:
    harness = _harness(tmp_path, status=7)

    status = perform_build(["app"], harness.runtime)

    assert status == 7
    assert not isinstance(status, ExitStatus)


def test_clean_passes_through_builder_defined_status(tmp_path: Path) -> None:
    harness = _harness(tmp_path, status=9)

    assert perform_build(["app", "--clean"], harness.runtime) == 9


def test_build_help_prints_version_and_build_options(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    status = perform_build(["--help"], harness.runtime)

    assert status == ExitStatus.SUCCESS
    lines = harness.host.output.splitlines()
    assert lines[0] == f"Version {__version__}"
    assert lines[1] == "Syntax:   compdrive --build [options] [project...]"
    assert lines[3] == "Examples: compdrive --build"
    assert "--clean" in harness.host.output
    assert "--outDir" not in harness.host.output
    assert harness.engine.calls == []


def test_build_parse_errors_exit_early(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    status = perform_build(["--outDir", "dist"], harness.runtime)

    assert status == ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    assert harness.host.output == "error TS5072: Unknown build option '--outDir'.\n"
    assert harness.engine.calls == []


@pytest.mark.parametrize("other", ["--watch", "--force", "--dry"])
def test_clean_cannot_be_combined(tmp_path: Path, other: str) -> None:
    harness = _harness(tmp_path)

    status = perform_build(["--clean", other], harness.runtime)

    assert status == ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    assert harness.host.output == (
        f"error TS6370: Options 'clean' and '{other[2:]}' cannot be combined.\n"
    )


def test_build_errors_use_pretty_reporter_from_build_options(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    perform_build(["--pretty", "--bogus"], harness.runtime)

    assert "\x1b[" in harness.host.output
    assert _ANSI.sub("", harness.host.output).startswith("error TS5072:")


def test_build_requires_modified_time(tmp_path: Path) -> None:
    harness = _harness(tmp_path, modified_time=False)

    status = perform_build(["app"], harness.runtime)

    assert status == ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    assert harness.host.output == (
        "error TS5001: The current host does not support the '--build' option.\n"
    )
    assert harness.engine.calls == []


def test_clean_requires_delete(tmp_path: Path) -> None:
    harness = _harness(tmp_path, delete=False)

    status = perform_build(["--clean", "app"], harness.runtime)

    assert status == ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    assert "'--build'" in harness.host.output


def test_build_does_not_require_delete(tmp_path: Path) -> None:
    harness = _harness(tmp_path, delete=False)

    assert perform_build(["app"], harness.runtime) == ExitStatus.SUCCESS


def test_clean_runs_clean_all_projects(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    status = perform_build(["--clean", "app"], harness.runtime)

    assert status == ExitStatus.SUCCESS
    assert "clean_all_projects" in harness.engine.calls
    assert "build_all_projects" not in harness.engine.calls


def test_build_watch_requires_watch_capability(tmp_path: Path) -> None:
    harness = _harness(tmp_path, watch=False)

    status = perform_build(["--watch", "app"], harness.runtime)

    assert status == ExitStatus.DIAGNOSTICS_PRESENT_OUTPUTS_SKIPPED
    assert harness.host.output == (
        "error TS5001: The current host does not support the '--watch' option.\n"
    )
    assert harness.engine.calls == []


def test_build_watch_builds_then_watches(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    status = perform_build(["-w", "app"], harness.runtime)

    assert status is None
    assert harness.engine.calls == [
        "create_solution_builder_with_watch_host",
        "create_solution_builder_with_watch",
        "build_all_projects",
        "create_builder_program",
        "start_watching",
    ]
    assert "watch_status" in harness.engine.reporters


def test_build_diagnostics_report_statistics_after_emit(tmp_path: Path) -> None:
    harness = _harness(tmp_path)

    perform_build(["app", "--diagnostics"], harness.runtime)

    lines = harness.host.output.splitlines()
    assert lines[0] == "Files:           1"
    assert lines[-1] == "Total time:  1.53s"
    assert not harness.runtime.stats.performance.enabled


def test_build_error_summary_only_when_pretty(tmp_path: Path) -> None:
    plain = _harness(tmp_path)
    perform_build(["app"], plain.runtime)
    assert plain.engine.reporters["error_summary"] is None

    pretty = _harness(tmp_path, tty=True)
    perform_build(["app"], pretty.runtime)
    assert pretty.engine.reporters["error_summary"] is not None
