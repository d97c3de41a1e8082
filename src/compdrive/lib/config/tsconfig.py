"""JSON project configuration discovery, parsing and serialization."""

from __future__ import annotations

import json
import logging
import os
import posixpath
import re
from dataclasses import fields, replace
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, cast

from compdrive.lib.domain import (
    CompilerOptions,
    ConfigParseResult,
    Diagnostic,
    ParsedCommandLine,
    ProjectReference,
)
from compdrive.lib.messages import Messages, create_compiler_diagnostic, create_file_diagnostic
from compdrive.lib.options import (
    COMPILER_OPTION_DECLARATIONS,
    OptionDeclaration,
    compiler_option_by_field,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from compdrive.lib.ports import System

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE_NAME = "tsconfig.json"

_CONFIG_OPTIONS: dict[str, OptionDeclaration] = {
    declaration.name.lower(): declaration
    for declaration in COMPILER_OPTION_DECLARATIONS
    if not declaration.command_line_only
}
_SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".d.ts")
_SCRIPT_EXTENSIONS: tuple[str, ...] = (".js", ".jsx")
_DEFAULT_EXCLUDES: tuple[str, ...] = ("node_modules", "bower_components", "jspm_packages")
_COMMENT_OR_STRING = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_OR_STRING = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')

_SCAFFOLD_DEFAULTS: dict[str, object] = {
    "target": "es5",
    "module": "commonjs",
    "strict": True,
}


def strip_json_comments(text: str) -> str:
    """Remove `//` and `/* */` comments, keeping strings and line numbers intact."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return "\n" * match.group(0).count("\n")

    return _COMMENT_OR_STRING.sub(_replace, text)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede `}` or `]`, leaving strings untouched.

    >>> strip_trailing_commas('{"a": [1, 2,], "b": ",}",}')
    '{"a": [1, 2], "b": ",}"}'
    """
    return _TRAILING_COMMA_OR_STRING.sub(lambda match: match.group(1) or "", text)


def normalize_path(path: str) -> str:
    """Use forward slashes and collapse `.` and `..` segments.

    >>> normalize_path("src\\\\app/../lib/")
    'src/lib'
    """
    if not path:
        return ""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return "" if normalized == "." else normalized


def combine_paths(directory: str, name: str) -> str:
    if not directory:
        return name
    return (PurePosixPath(directory) / name).as_posix()


def _relative_to(config_dir: str, path: str) -> str:
    relative = os.path.relpath(path, config_dir or ".")
    return Path(relative).as_posix()


class JsonConfigLoader:
    """`ConfigLoader` for JSON project files such as `tsconfig.json`."""

    def __init__(self, host: System, config_file_name: str = DEFAULT_CONFIG_FILE_NAME) -> None:
        self._host = host
        self._config_file_name = config_file_name

    @property
    def config_file_name(self) -> str:
        return self._config_file_name

    def find_config_file(self, search_path: str) -> str | None:
        """Walk up from `search_path` to the nearest configuration file."""

        directory = PurePosixPath(search_path)
        while True:
            candidate = (directory / self._config_file_name).as_posix()
            if self._host.file_exists(candidate):
                return candidate
            parent = directory.parent
            if parent == directory:
                return None
            directory = parent

    def parse_config_file(
        self,
        config_file_path: str,
        overrides: CompilerOptions,
    ) -> ConfigParseResult:
        errors: list[Diagnostic] = []
        config_dir = PurePosixPath(config_file_path).parent.as_posix()

        text = self._host.read_file(config_file_path)
        if text is None:
            errors.append(create_compiler_diagnostic(Messages.CANNOT_READ_FILE, config_file_path))
            return self._result(config_file_path, CompilerOptions(), overrides, errors=errors)

        try:
            payload_obj = json.loads(strip_trailing_commas(strip_json_comments(text)))
        except json.JSONDecodeError as error:
            errors.append(
                create_file_diagnostic(
                    Messages.FAILED_TO_PARSE_FILE,
                    config_file_path,
                    error.msg,
                    file_name=config_file_path,
                    line=error.lineno,
                    column=error.colno,
                )
            )
            return self._result(config_file_path, CompilerOptions(), overrides, errors=errors)

        if not isinstance(payload_obj, dict):
            errors.append(
                create_file_diagnostic(
                    Messages.FAILED_TO_PARSE_FILE,
                    config_file_path,
                    "expected a JSON object",
                    file_name=config_file_path,
                )
            )
            return self._result(config_file_path, CompilerOptions(), overrides, errors=errors)

        raw = cast("dict[str, object]", payload_obj)
        file_options = self._convert_compiler_options(
            raw.get("compilerOptions", {}),
            config_file_path=config_file_path,
            config_dir=config_dir,
            errors=errors,
        )
        references = self._convert_references(
            raw.get("references", []),
            config_file_path=config_file_path,
            config_dir=config_dir,
            errors=errors,
        )
        merged = file_options.merged_with(overrides)
        file_names = self._resolve_file_names(raw, merged, config_file_path, config_dir)
        return self._result(
            config_file_path,
            file_options,
            overrides,
            file_names=file_names,
            errors=errors,
            references=references,
            raw=raw,
        )

    def convert_to_config(
        self,
        parsed: ParsedCommandLine | ConfigParseResult,
        config_file_path: str,
    ) -> dict[str, object]:
        """Return the effective configuration as a JSON-ready mapping."""

        config_dir = PurePosixPath(config_file_path).parent.as_posix()
        compiler_options: dict[str, object] = {}
        for item in fields(CompilerOptions):
            value = getattr(parsed.options, item.name)
            if value is None:
                continue
            declaration = compiler_option_by_field(item.name)
            if declaration is None or declaration.command_line_only:
                continue
            if declaration.is_file_path and isinstance(value, str):
                value = _relative_to(config_dir, value)
            if isinstance(value, tuple):
                value = list(value)
            compiler_options[declaration.name] = value

        config: dict[str, object] = {"compilerOptions": compiler_options}
        references = getattr(parsed, "project_references", ())
        if references:
            config["references"] = [
                {
                    "path": _relative_to(config_dir, reference.path),
                    **({"prepend": True} if reference.prepend else {}),
                    **({"circular": True} if reference.circular else {}),
                }
                for reference in references
            ]
        config["files"] = [_relative_to(config_dir, name) for name in parsed.file_names]
        raw = getattr(parsed, "raw", {})
        for key in ("include", "exclude"):
            if key in raw:
                config[key] = raw[key]
        return config

    def generate_config(self, options: CompilerOptions, file_names: Sequence[str]) -> str:
        """Scaffold the content of a new configuration file."""

        compiler_options: dict[str, object] = dict(_SCAFFOLD_DEFAULTS)
        for item in fields(CompilerOptions):
            value = getattr(options, item.name)
            declaration = compiler_option_by_field(item.name)
            if value is None or declaration is None or declaration.command_line_only:
                continue
            compiler_options[declaration.name] = list(value) if isinstance(value, tuple) else value

        config: dict[str, object] = {"compilerOptions": compiler_options}
        if file_names:
            config["files"] = list(file_names)
        return json.dumps(config, indent=4) + self._host.new_line

    def _result(
        self,
        config_file_path: str,
        file_options: CompilerOptions,
        overrides: CompilerOptions,
        *,
        file_names: tuple[str, ...] = (),
        errors: list[Diagnostic],
        references: tuple[ProjectReference, ...] = (),
        raw: dict[str, object] | None = None,
    ) -> ConfigParseResult:
        options = replace(
            file_options.merged_with(overrides),
            config_file_path=config_file_path,
        )
        return ConfigParseResult(
            options=options,
            config_file_path=config_file_path,
            file_names=file_names,
            errors=tuple(errors),
            project_references=references,
            raw=raw or {},
        )

    def _convert_compiler_options(
        self,
        raw_options: object,
        *,
        config_file_path: str,
        config_dir: str,
        errors: list[Diagnostic],
    ) -> CompilerOptions:
        if not isinstance(raw_options, dict):
            errors.append(
                create_file_diagnostic(
                    Messages.OPTION_REQUIRES_TYPE,
                    "compilerOptions",
                    "object",
                    file_name=config_file_path,
                )
            )
            return CompilerOptions()

        values: dict[str, object] = {}
        for key, value in cast("dict[str, object]", raw_options).items():
            declaration = _CONFIG_OPTIONS.get(key.lower())
            if declaration is None:
                errors.append(
                    create_file_diagnostic(
                        Messages.UNKNOWN_COMPILER_OPTION, key, file_name=config_file_path
                    )
                )
                continue
            if value is None:
                continue
            converted = self._convert_value(declaration, value, config_file_path, errors)
            if converted is None:
                continue
            if declaration.is_file_path and isinstance(converted, str):
                converted = normalize_path(combine_paths(config_dir, converted))
            values[declaration.field] = converted
        return CompilerOptions(**values)  # type: ignore[arg-type]

    def _convert_value(
        self,
        declaration: OptionDeclaration,
        value: object,
        config_file_path: str,
        errors: list[Diagnostic],
    ) -> object | None:
        if declaration.kind == "boolean":
            if isinstance(value, bool):
                return value
            expected = "boolean"
        elif declaration.kind == "string":
            if isinstance(value, str):
                return value
            expected = "string"
        elif declaration.kind == "list":
            if isinstance(value, list) and all(isinstance(item, str) for item in value):
                return tuple(cast("list[str]", value))
            expected = "Array"
        else:
            if isinstance(value, str) and value.lower() in declaration.choices:
                return value.lower()
            errors.append(
                create_file_diagnostic(
                    Messages.ARGUMENT_MUST_BE_ONE_OF,
                    f"--{declaration.name}",
                    ", ".join(f"'{choice}'" for choice in declaration.choices),
                    file_name=config_file_path,
                )
            )
            return None

        errors.append(
            create_file_diagnostic(
                Messages.OPTION_REQUIRES_TYPE,
                declaration.name,
                expected,
                file_name=config_file_path,
            )
        )
        return None

    def _convert_references(
        self,
        raw_references: object,
        *,
        config_file_path: str,
        config_dir: str,
        errors: list[Diagnostic],
    ) -> tuple[ProjectReference, ...]:
        if not isinstance(raw_references, list):
            errors.append(
                create_file_diagnostic(
                    Messages.OPTION_REQUIRES_TYPE,
                    "references",
                    "Array",
                    file_name=config_file_path,
                )
            )
            return ()

        references: list[ProjectReference] = []
        for item in cast("list[object]", raw_references):
            path = item.get("path") if isinstance(item, dict) else None
            if not isinstance(path, str):
                errors.append(
                    create_file_diagnostic(
                        Messages.REFERENCE_MUST_HAVE_PATH,
                        config_file_path,
                        file_name=config_file_path,
                    )
                )
                continue
            entry = cast("dict[str, object]", item)
            references.append(
                ProjectReference(
                    path=normalize_path(combine_paths(config_dir, path)),
                    prepend=bool(entry.get("prepend", False)),
                    circular=bool(entry.get("circular", False)),
                )
            )
        return tuple(references)

    def _resolve_file_names(
        self,
        raw: dict[str, object],
        options: CompilerOptions,
        config_file_path: str,
        config_dir: str,
    ) -> tuple[str, ...]:
        resolved: list[str] = []
        seen: set[str] = set()

        def _add(name: str) -> None:
            if name not in seen:
                seen.add(name)
                resolved.append(name)

        files = raw.get("files")
        if isinstance(files, list):
            for name in cast("list[object]", files):
                if isinstance(name, str):
                    _add(normalize_path(combine_paths(config_dir, name)))

        include = raw.get("include")
        if include is None and files is None:
            include = ["**/*"]
        if not isinstance(include, list):
            return tuple(resolved)

        exclude_obj = raw.get("exclude")
        excludes = (
            [item for item in cast("list[object]", exclude_obj) if isinstance(item, str)]
            if isinstance(exclude_obj, list)
            else list(_DEFAULT_EXCLUDES)
        )
        if options.out_dir is not None and exclude_obj is None:
            excludes.append(_relative_to(config_dir, options.out_dir))

        extensions = _SOURCE_EXTENSIONS + (_SCRIPT_EXTENSIONS if options.allow_js else ())
        root = Path(config_dir or ".")
        for pattern in cast("list[object]", include):
            if not isinstance(pattern, str):
                continue
            for match in sorted(root.glob(pattern)):
                if not match.is_file() or not match.name.endswith(extensions):
                    continue
                relative = match.relative_to(root).as_posix()
                if any(_is_excluded(relative, exclude) for exclude in excludes):
                    continue
                _add(normalize_path(combine_paths(config_dir, relative)))

        if not resolved:
            logger.debug("No inputs found for config file '%s'.", config_file_path)
        return tuple(resolved)


def _is_excluded(relative: str, exclude: str) -> bool:
    pattern = exclude.strip("/").removeprefix("./")
    if not pattern:
        return False
    if PurePosixPath(relative).match(pattern):
        return True
    return relative == pattern or relative.startswith(f"{pattern}/")
