"""Version and help text printing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from compdrive import __version__
from compdrive.lib.formatting import tabular

if TYPE_CHECKING:
    from collections.abc import Sequence

    from compdrive.lib.options import OptionDeclaration
    from compdrive.lib.ports import System

PROGRAM_NAME = "compdrive"


def version_text() -> str:
    return f"Version {__version__}"


def print_version(host: System) -> None:
    host.write(version_text() + host.new_line)


def _option_usage(declaration: OptionDeclaration) -> str:
    label = f" {declaration.param_label}" if declaration.param_label else ""
    usage = f"--{declaration.name}{label}"
    if declaration.short_name is not None:
        usage = f"-{declaration.short_name}{label}, {usage}"
    return usage


def _option_description(declaration: OptionDeclaration) -> str:
    if not declaration.choices:
        return declaration.description
    allowed = ", ".join(f"'{choice}'" for choice in declaration.choices)
    return f"{declaration.description} Allowed values: {allowed}."


def help_lines(options: Sequence[OptionDeclaration], command_prefix: str = "") -> list[str]:
    """Render usage, examples and the aligned option list."""

    syntax = f"{PROGRAM_NAME} {command_prefix}[options] [file...]"
    if command_prefix:
        syntax = f"{PROGRAM_NAME} {command_prefix}[options] [project...]"
    examples = (
        [
            f"{PROGRAM_NAME} {command_prefix}".rstrip(),
            f"{PROGRAM_NAME} {command_prefix}src/tsconfig.json",
            f"{PROGRAM_NAME} {command_prefix}--clean",
        ]
        if command_prefix
        else [
            f"{PROGRAM_NAME} hello.ts",
            f"{PROGRAM_NAME} --outFile file.js file.ts",
            f"{PROGRAM_NAME} @args.txt",
            f"{PROGRAM_NAME} --build tsconfig.json",
        ]
    )

    lines = [f"Syntax:   {syntax}", ""]
    lines.append(f"Examples: {examples[0]}")
    lines.extend(f"          {example}" for example in examples[1:])
    lines.extend(["", "Options:"])
    rows = [[_option_usage(item), _option_description(item)] for item in options]
    lines.extend(f" {line}" for line in tabular(rows))
    lines.append("")
    return lines


def print_help(
    host: System,
    options: Sequence[OptionDeclaration],
    command_prefix: str = "",
) -> None:
    for line in help_lines(options, command_prefix):
        host.write(line + host.new_line)
