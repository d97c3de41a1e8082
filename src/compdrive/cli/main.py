"""Cyclopts CLI entry point for compdrive."""

from __future__ import annotations

import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from compdrive import __version__
from compdrive.lib.config.settings import load_settings
from compdrive.lib.domain import ExitStatus
from compdrive.lib.resolver import execute_command_line
from compdrive.lib.runtime import DriverRuntime, build_runtime

if TYPE_CHECKING:
    from collections.abc import Sequence

# The driver owns `--help`, `-h`, `--version` and `-v`, so cyclopts must not.
app = App(
    name="compdrive",
    help="Compiler command-line driver",
    version=__version__,
    help_flags=(),
    version_flags=(),
    help_formatter="plain",
)

_RUNTIME: ContextVar[DriverRuntime | None] = ContextVar("_RUNTIME", default=None)


def get_runtime() -> DriverRuntime:
    runtime = _RUNTIME.get()
    if runtime is None:
        raise RuntimeError("compdrive runtime is not initialised")
    return runtime


def exit_code(status: ExitStatus | int | None) -> int:
    """Map a driver outcome to a process exit code; a finished watch is success."""

    if status is None:
        return int(ExitStatus.SUCCESS)
    return int(status)


@app.default
def drive(
    *tokens: Annotated[str, Parameter(allow_leading_hyphen=True)],
) -> None:
    """Compile files or projects, or build with --build."""

    status = execute_command_line(list(tokens), get_runtime())
    raise SystemExit(exit_code(status))


def _operation_error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `compdrive` and `python -m compdrive`."""

    from compdrive.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)

    try:
        settings = load_settings()
    except (ValueError, OSError) as exc:
        configure_logging()
        print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
        raise SystemExit(1) from None

    configure_logging(json_mode=settings.log_json, verbosity=settings.log_verbosity)

    try:
        runtime = build_runtime(settings)
    except (KeyError, ValueError, OSError) as exc:
        print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
        raise SystemExit(1) from None

    token = _RUNTIME.set(runtime)
    try:
        try:
            # `--` keeps cyclopts from interpreting compiler flags.
            app(["--", *args])
        except (KeyError, ValueError, FileNotFoundError, OSError) as exc:
            print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
            raise SystemExit(1) from None
    finally:
        _RUNTIME.reset(token)
