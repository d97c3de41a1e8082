"""Default command-line parser for compiler and build invocations."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from compdrive.lib.config.tsconfig import normalize_path
from compdrive.lib.domain import (
    BuildOptions,
    CompilerOptions,
    Diagnostic,
    ParsedBuildCommand,
    ParsedCommandLine,
)
from compdrive.lib.messages import DiagnosticMessage, Messages, create_compiler_diagnostic
from compdrive.lib.options import (
    BUILD_OPTION_DECLARATIONS,
    COMPILER_OPTION_DECLARATIONS,
    OptionDeclaration,
    option_lookup,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from compdrive.lib.ports import System

_COMPILER_LOOKUP = option_lookup(COMPILER_OPTION_DECLARATIONS)
_BUILD_LOOKUP = option_lookup(BUILD_OPTION_DECLARATIONS)

# `--clean` deletes outputs, so it cannot run alongside these.
_CLEAN_INCOMPATIBLE: tuple[str, ...] = ("watch", "force", "dry")


@dataclass(slots=True)
class _TokenScan:
    values: dict[str, object] = field(default_factory=dict)
    positionals: list[str] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)
    # Normalized paths of the response files currently being expanded.
    expanding: set[str] = field(default_factory=set)


def strip_option_prefix(token: str) -> str:
    """Drop one or two leading dashes.

    >>> strip_option_prefix("--outDir")
    'outDir'
    """
    if token.startswith("--"):
        return token[2:]
    if token.startswith("-"):
        return token[1:]
    return token


def _format_choices(choices: tuple[str, ...]) -> str:
    return ", ".join(f"'{choice}'" for choice in choices)


class DefaultCommandLineParser:
    """Parse raw arguments against the option tables, collecting diagnostics."""

    def __init__(self, host: System | None = None) -> None:
        self._host = host

    def parse_command_line(self, args: Sequence[str]) -> ParsedCommandLine:
        scan = _TokenScan()
        self._scan(list(args), _COMPILER_LOOKUP, Messages.UNKNOWN_COMPILER_OPTION, scan)
        return ParsedCommandLine(
            options=CompilerOptions(**scan.values),  # type: ignore[arg-type]
            file_names=tuple(scan.positionals),
            errors=tuple(scan.errors),
        )

    def parse_build_command(self, args: Sequence[str]) -> ParsedBuildCommand:
        scan = _TokenScan()
        self._scan(list(args), _BUILD_LOOKUP, Messages.UNKNOWN_BUILD_OPTION, scan)
        build_options = BuildOptions(**scan.values)  # type: ignore[arg-type]

        if build_options.clean:
            for other in _CLEAN_INCOMPATIBLE:
                if getattr(build_options, other):
                    scan.errors.append(
                        create_compiler_diagnostic(
                            Messages.OPTIONS_CANNOT_BE_COMBINED, "clean", other
                        )
                    )

        # `-b` alone means "build the project in the current directory".
        projects = tuple(scan.positionals) or (".",)
        return ParsedBuildCommand(
            build_options=build_options,
            projects=projects,
            errors=tuple(scan.errors),
        )

    def _scan(
        self,
        args: list[str],
        lookup: dict[str, OptionDeclaration],
        unknown_message: DiagnosticMessage,
        scan: _TokenScan,
    ) -> None:
        i = 0
        while i < len(args):
            token = args[i]
            i += 1
            if not token:
                continue
            if token.startswith("@"):
                self._expand_response_file(token[1:], lookup, unknown_message, scan)
                continue
            if not token.startswith("-"):
                scan.positionals.append(token)
                continue

            declaration = lookup.get(strip_option_prefix(token).lower())
            if declaration is None:
                scan.errors.append(create_compiler_diagnostic(unknown_message, token))
                continue
            i = self._consume_value(declaration, args, i, scan)

    def _consume_value(
        self,
        declaration: OptionDeclaration,
        args: list[str],
        i: int,
        scan: _TokenScan,
    ) -> int:
        if declaration.kind == "boolean":
            following = args[i] if i < len(args) else None
            scan.values[declaration.field] = following != "false"
            if following in {"true", "false"}:
                return i + 1
            return i

        if i >= len(args):
            scan.errors.append(
                create_compiler_diagnostic(Messages.OPTION_EXPECTS_ARGUMENT, declaration.name)
            )
            return i

        raw_value = args[i]
        if declaration.kind == "string":
            scan.values[declaration.field] = raw_value
        elif declaration.kind == "list":
            scan.values[declaration.field] = tuple(
                item.strip() for item in raw_value.split(",") if item.strip()
            )
        else:
            normalized = raw_value.strip().lower()
            if normalized in declaration.choices:
                scan.values[declaration.field] = normalized
            else:
                scan.errors.append(
                    create_compiler_diagnostic(
                        Messages.ARGUMENT_MUST_BE_ONE_OF,
                        f"--{declaration.name}",
                        _format_choices(declaration.choices),
                    )
                )
        return i + 1

    def _expand_response_file(
        self,
        file_name: str,
        lookup: dict[str, OptionDeclaration],
        unknown_message: DiagnosticMessage,
        scan: _TokenScan,
    ) -> None:
        key = normalize_path(file_name)
        if key in scan.expanding:
            scan.errors.append(
                create_compiler_diagnostic(Messages.RESPONSE_FILE_INCLUDES_ITSELF, file_name)
            )
            return
        text = self._host.read_file(file_name) if self._host is not None else None
        if text is None:
            scan.errors.append(create_compiler_diagnostic(Messages.FILE_NOT_FOUND, file_name))
            return
        try:
            tokens = shlex.split(text)
        except ValueError as error:
            scan.errors.append(
                create_compiler_diagnostic(Messages.FAILED_TO_PARSE_FILE, file_name, str(error))
            )
            return
        scan.expanding.add(key)
        try:
            self._scan(tokens, lookup, unknown_message, scan)
        finally:
            scan.expanding.discard(key)
