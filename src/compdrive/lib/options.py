"""Declarative option tables for compiler and build command lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

OptionKind = Literal["boolean", "string", "list", "enum"]


@dataclass(frozen=True, slots=True)
class OptionDeclaration:
    """One recognized command-line option."""

    name: str
    field: str
    kind: OptionKind
    description: str = ""
    short_name: str | None = None
    choices: tuple[str, ...] = ()
    param_label: str | None = None
    show_in_simplified_help: bool = False
    command_line_only: bool = False
    is_file_path: bool = False


COMPILER_OPTION_DECLARATIONS: tuple[OptionDeclaration, ...] = (
    OptionDeclaration(
        "help", "help", "boolean", "Print this message.",
        short_name="h", show_in_simplified_help=True, command_line_only=True,
    ),
    OptionDeclaration(
        "all", "all", "boolean", "Show all compiler options.", command_line_only=True,
    ),
    OptionDeclaration(
        "version", "version", "boolean", "Print the compiler's version.",
        short_name="v", show_in_simplified_help=True, command_line_only=True,
    ),
    OptionDeclaration(
        "init", "init", "boolean",
        "Initializes a project and creates a configuration file.",
        show_in_simplified_help=True, command_line_only=True,
    ),
    OptionDeclaration(
        "project", "project", "string",
        "Compile the project given the path to its configuration file, or to a folder "
        "with a configuration file.",
        short_name="p", param_label="FILE OR DIRECTORY",
        show_in_simplified_help=True, command_line_only=True, is_file_path=True,
    ),
    OptionDeclaration(
        "build", "build", "boolean",
        "Build one or more projects and their dependencies, if out of date.",
        short_name="b", show_in_simplified_help=True, command_line_only=True,
    ),
    OptionDeclaration(
        "showConfig", "show_config", "boolean",
        "Print the final configuration instead of building.", command_line_only=True,
    ),
    OptionDeclaration(
        "locale", "locale", "string",
        "The locale to use to show error messages, e.g. en-us.", command_line_only=True,
    ),
    OptionDeclaration(
        "pretty", "pretty", "boolean",
        "Stylize errors and messages using color and context.",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "watch", "watch", "boolean", "Watch input files.",
        short_name="w", show_in_simplified_help=True, command_line_only=True,
    ),
    OptionDeclaration(
        "preserveWatchOutput", "preserve_watch_output", "boolean",
        "Whether to keep outdated console output in watch mode instead of clearing the screen.",
    ),
    OptionDeclaration(
        "listFiles", "list_files", "boolean", "Print names of files part of the compilation.",
    ),
    OptionDeclaration("diagnostics", "diagnostics", "boolean", "Show diagnostic information."),
    OptionDeclaration(
        "extendedDiagnostics", "extended_diagnostics", "boolean",
        "Show verbose diagnostic information.",
    ),
    OptionDeclaration(
        "incremental", "incremental", "boolean", "Enable incremental compilation.",
        short_name="i",
    ),
    OptionDeclaration(
        "composite", "composite", "boolean", "Enable project compilation.",
    ),
    OptionDeclaration(
        "tsBuildInfoFile", "ts_build_info_file", "string",
        "Specify file to store incremental compilation information.",
        param_label="FILE", is_file_path=True,
    ),
    OptionDeclaration(
        "target", "target", "enum", "Specify ECMAScript target version.",
        short_name="t",
        choices=(
            "es3", "es5", "es2015", "es2016", "es2017", "es2018", "es2019", "es2020", "esnext",
        ),
        param_label="VERSION", show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "module", "module", "enum", "Specify module code generation.",
        short_name="m",
        choices=("none", "commonjs", "amd", "system", "umd", "es2015", "esnext"),
        param_label="KIND", show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "moduleResolution", "module_resolution", "enum",
        "Specify module resolution strategy.",
        choices=("node", "classic"), param_label="STRATEGY",
    ),
    OptionDeclaration(
        "lib", "lib", "list", "Specify library files to be included in the compilation.",
        param_label="LIBS", show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "jsx", "jsx", "enum", "Specify JSX code generation.",
        choices=("preserve", "react-native", "react"), param_label="KIND",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "allowJs", "allow_js", "boolean", "Allow javascript files to be compiled.",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "checkJs", "check_js", "boolean", "Report errors in .js files.",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "declaration", "declaration", "boolean",
        "Generates corresponding '.d.ts' file.",
        short_name="d", show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "sourceMap", "source_map", "boolean", "Generates corresponding '.map' file.",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "outFile", "out_file", "string",
        "Concatenate and emit output to single file.",
        param_label="FILE", show_in_simplified_help=True, is_file_path=True,
    ),
    OptionDeclaration(
        "outDir", "out_dir", "string", "Redirect output structure to the directory.",
        param_label="DIRECTORY", show_in_simplified_help=True, is_file_path=True,
    ),
    OptionDeclaration(
        "rootDir", "root_dir", "string",
        "Specify the root directory of input files.",
        param_label="LOCATION", is_file_path=True,
    ),
    OptionDeclaration(
        "baseUrl", "base_url", "string",
        "Base directory to resolve non-absolute module names.",
        is_file_path=True,
    ),
    OptionDeclaration("noEmit", "no_emit", "boolean", "Do not emit outputs."),
    OptionDeclaration(
        "strict", "strict", "boolean", "Enable all strict type-checking options.",
        show_in_simplified_help=True,
    ),
    OptionDeclaration(
        "noImplicitAny", "no_implicit_any", "boolean",
        "Raise error on expressions and declarations with an implied 'any' type.",
    ),
)

BUILD_OPTION_DECLARATIONS: tuple[OptionDeclaration, ...] = (
    OptionDeclaration("help", "help", "boolean", "Print this message.", short_name="h"),
    OptionDeclaration(
        "verbose", "verbose", "boolean", "Enable verbose logging.", short_name="v",
    ),
    OptionDeclaration(
        "dry", "dry", "boolean",
        "Show what would be built (or deleted, if specified with '--clean').",
        short_name="d",
    ),
    OptionDeclaration(
        "force", "force", "boolean",
        "Build all projects, including those that appear to be up to date.",
        short_name="f",
    ),
    OptionDeclaration(
        "clean", "clean", "boolean", "Delete the outputs of all projects.",
    ),
    OptionDeclaration("watch", "watch", "boolean", "Watch input files.", short_name="w"),
    OptionDeclaration(
        "preserveWatchOutput", "preserve_watch_output", "boolean",
        "Whether to keep outdated console output in watch mode instead of clearing the screen.",
    ),
    OptionDeclaration(
        "pretty", "pretty", "boolean",
        "Stylize errors and messages using color and context.",
    ),
    OptionDeclaration("diagnostics", "diagnostics", "boolean", "Show diagnostic information."),
    OptionDeclaration(
        "extendedDiagnostics", "extended_diagnostics", "boolean",
        "Show verbose diagnostic information.",
    ),
    OptionDeclaration(
        "locale", "locale", "string",
        "The locale to use to show error messages, e.g. en-us.",
    ),
)


def option_lookup(
    declarations: tuple[OptionDeclaration, ...],
) -> dict[str, OptionDeclaration]:
    """Index declarations by lower-cased long and short names."""

    lookup: dict[str, OptionDeclaration] = {}
    for declaration in declarations:
        lookup[declaration.name.lower()] = declaration
        if declaration.short_name is not None:
            lookup[declaration.short_name.lower()] = declaration
    return lookup


def compiler_option_by_field(field_name: str) -> OptionDeclaration | None:
    for declaration in COMPILER_OPTION_DECLARATIONS:
        if declaration.field == field_name:
            return declaration
    return None


def options_for_help(*, show_all: bool) -> list[OptionDeclaration]:
    """Every option sorted case-insensitively with `--all`, else the simplified view."""

    if show_all:
        return sorted(COMPILER_OPTION_DECLARATIONS, key=lambda item: item.name.lower())
    return [item for item in COMPILER_OPTION_DECLARATIONS if item.show_in_simplified_help]
