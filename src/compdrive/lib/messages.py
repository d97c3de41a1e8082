"""Diagnostic message catalog and diagnostic construction."""

from __future__ import annotations

import re
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

from compdrive.lib.domain import Diagnostic

if TYPE_CHECKING:
    from collections.abc import Mapping

    from compdrive.lib.domain import DiagnosticCategory


@dataclass(frozen=True, slots=True)
class DiagnosticMessage:
    """Template for one stable diagnostic code."""

    code: int
    category: DiagnosticCategory
    text: str


class Messages:
    """Messages emitted by the driver itself."""

    UNKNOWN_COMPILER_OPTION = DiagnosticMessage(5023, "error", "Unknown compiler option '{0}'.")
    UNKNOWN_BUILD_OPTION = DiagnosticMessage(5072, "error", "Unknown build option '{0}'.")
    OPTION_REQUIRES_TYPE = DiagnosticMessage(
        5024, "error", "Compiler option '{0}' requires a value of type {1}."
    )
    CANNOT_READ_FILE = DiagnosticMessage(5083, "error", "Cannot read file '{0}'.")
    FAILED_TO_PARSE_FILE = DiagnosticMessage(5014, "error", "Failed to parse file '{0}': {1}.")
    HOST_DOES_NOT_SUPPORT_OPTION = DiagnosticMessage(
        5001, "error", "The current host does not support the '{0}' option."
    )
    PROJECT_CANNOT_BE_MIXED_WITH_SOURCE_FILES = DiagnosticMessage(
        5042, "error", "Option 'project' cannot be mixed with source files on a command line."
    )
    CONFIG_ALREADY_DEFINED = DiagnosticMessage(
        5054, "error", "A '{0}' file is already defined at: '{1}'."
    )
    CANNOT_FIND_CONFIG_IN_DIRECTORY = DiagnosticMessage(
        5057, "error", "Cannot find a {0} file at the specified directory: '{1}'."
    )
    SPECIFIED_PATH_DOES_NOT_EXIST = DiagnosticMessage(
        5058, "error", "The specified path does not exist: '{0}'."
    )
    OPTION_EXPECTS_ARGUMENT = DiagnosticMessage(
        6044, "error", "Compiler option '{0}' expects an argument."
    )
    ARGUMENT_MUST_BE_ONE_OF = DiagnosticMessage(
        6046, "error", "Argument for '{0}' option must be: {1}."
    )
    LOCALE_FORM = DiagnosticMessage(
        6048,
        "error",
        "Locale must be of the form <language> or <language>-<territory>. "
        "For example '{0}' or '{1}'.",
    )
    UNSUPPORTED_LOCALE = DiagnosticMessage(6049, "error", "Unsupported locale '{0}'.")
    SUCCESSFULLY_CREATED_CONFIG = DiagnosticMessage(
        6071, "message", "Successfully created a {0} file."
    )
    BUILD_MUST_BE_FIRST_ARGUMENT = DiagnosticMessage(
        6369, "error", "Option '--build' must be the first command line argument."
    )
    OPTIONS_CANNOT_BE_COMBINED = DiagnosticMessage(
        6370, "error", "Options '{0}' and '{1}' cannot be combined."
    )
    FILE_NOT_FOUND = DiagnosticMessage(6053, "error", "File '{0}' not found.")
    RESPONSE_FILE_INCLUDES_ITSELF = DiagnosticMessage(
        5097, "error", "Response file '{0}' includes itself."
    )
    REFERENCE_MUST_HAVE_PATH = DiagnosticMessage(
        5090, "error", "Each project reference in '{0}' must have a string 'path'."
    )


_LOCALIZED_MESSAGES: ContextVar[Mapping[int, str] | None] = ContextVar(
    "_LOCALIZED_MESSAGES", default=None
)

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def set_localized_messages(catalog: Mapping[int, str] | None) -> None:
    """Install translated message templates keyed by diagnostic code."""

    _LOCALIZED_MESSAGES.set(catalog)


def get_localized_messages() -> Mapping[int, str] | None:
    return _LOCALIZED_MESSAGES.get()


def format_message(template: str, *args: object) -> str:
    """Substitute `{N}` placeholders; unknown indexes are left untouched."""

    def _substitute(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < len(args):
            return str(args[index])
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, template)


def localized_text(message: DiagnosticMessage) -> str:
    catalog = _LOCALIZED_MESSAGES.get()
    if catalog is None:
        return message.text
    return catalog.get(message.code, message.text)


def create_compiler_diagnostic(message: DiagnosticMessage, *args: object) -> Diagnostic:
    """Build a location-less diagnostic from a catalog entry."""

    return Diagnostic(
        code=message.code,
        category=message.category,
        message_text=format_message(localized_text(message), *args),
    )


def create_file_diagnostic(
    message: DiagnosticMessage,
    *args: object,
    file_name: str,
    line: int | None = None,
    column: int | None = None,
) -> Diagnostic:
    return Diagnostic(
        code=message.code,
        category=message.category,
        message_text=format_message(localized_text(message), *args),
        file_name=file_name,
        line=line,
        column=column,
    )
