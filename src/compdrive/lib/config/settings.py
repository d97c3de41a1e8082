"""Driver-level operational settings loader."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import cast

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = ".compdrive.toml"


@dataclass(frozen=True, slots=True)
class DriverSettings:
    """Resolved operational settings for one driver invocation."""

    config_file_name: str = "tsconfig.json"
    new_line: str = "lf"
    engine: str = ""
    locale_dir: str = ""
    log_verbosity: int = 0
    log_json: bool = False


_SECTION_KEY_MAP: dict[str, dict[str, str]] = {
    "driver": {
        "config_file_name": "config_file_name",
        "config_file": "config_file_name",
        "new_line": "new_line",
        "newline": "new_line",
        "engine": "engine",
        "locale_dir": "locale_dir",
    },
    "logging": {
        "verbosity": "log_verbosity",
        "log_verbosity": "log_verbosity",
        "json": "log_json",
        "log_json": "log_json",
    },
}

_TOP_LEVEL_KEY_MAP: dict[str, str] = {
    "config_file_name": "config_file_name",
    "new_line": "new_line",
    "engine": "engine",
    "locale_dir": "locale_dir",
    "log_verbosity": "log_verbosity",
    "log_json": "log_json",
}

_ENV_OVERRIDE_MAP: dict[str, str] = {
    "COMPDRIVE_CONFIG_FILE_NAME": "config_file_name",
    "COMPDRIVE_NEW_LINE": "new_line",
    "COMPDRIVE_ENGINE": "engine",
    "COMPDRIVE_LOCALE_DIR": "locale_dir",
    "COMPDRIVE_LOG_VERBOSITY": "log_verbosity",
    "COMPDRIVE_LOG_JSON": "log_json",
}

_NEW_LINE_KINDS = frozenset({"lf", "crlf"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})
# Empty strings are meaningful here: they mean "auto".
_OPTIONAL_STRING_FIELDS = frozenset({"engine", "locale_dir"})


def _expected_type_name(field_name: str) -> str:
    if field_name == "log_verbosity":
        return "int"
    if field_name == "log_json":
        return "bool"
    return "str"


def _coerce_file_value(*, field_name: str, raw_value: object, source: str) -> object:
    expected = _expected_type_name(field_name)
    if expected == "int":
        if isinstance(raw_value, bool) or not isinstance(raw_value, int):
            raise ValueError(
                f"Invalid value for '{source}': expected int, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        return raw_value

    if expected == "bool":
        if not isinstance(raw_value, bool):
            raise ValueError(
                f"Invalid value for '{source}': expected bool, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        return raw_value

    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    normalized = raw_value.strip()
    if not normalized and field_name not in _OPTIONAL_STRING_FIELDS:
        raise ValueError(f"Invalid value for '{source}': expected non-empty string.")
    return normalized


def _coerce_env_value(*, field_name: str, raw_value: str, env_name: str) -> object:
    expected = _expected_type_name(field_name)
    if expected == "int":
        try:
            return int(raw_value.strip())
        except ValueError as error:
            raise ValueError(
                f"Invalid environment override '{env_name}': expected int, got {raw_value!r}."
            ) from error

    if expected == "bool":
        normalized = raw_value.strip().lower()
        if normalized in _TRUTHY:
            return True
        if normalized in _FALSY:
            return False
        raise ValueError(
            f"Invalid environment override '{env_name}': expected bool, got {raw_value!r}."
        )

    normalized = raw_value.strip()
    if not normalized and field_name not in _OPTIONAL_STRING_FIELDS:
        raise ValueError(
            f"Invalid environment override '{env_name}': expected non-empty string."
        )
    return normalized


def _default_values() -> dict[str, object]:
    defaults = DriverSettings()
    return {field.name: getattr(defaults, field.name) for field in fields(DriverSettings)}


def _apply_toml_payload(
    *,
    values: dict[str, object],
    payload: dict[str, object],
    path: Path,
) -> None:
    for key, raw_value in payload.items():
        section_map = _SECTION_KEY_MAP.get(key)
        if section_map is not None:
            if not isinstance(raw_value, dict):
                raise ValueError(f"Invalid value for '{key}' in '{path}': expected table.")
            for section_key, section_value in cast("dict[str, object]", raw_value).items():
                field_name = section_map.get(section_key)
                if field_name is None:
                    logger.warning(
                        "Ignoring unknown compdrive setting '%s.%s'.",
                        key,
                        section_key,
                    )
                    continue
                values[field_name] = _coerce_file_value(
                    field_name=field_name,
                    raw_value=section_value,
                    source=f"{key}.{section_key}",
                )
            continue

        field_name = _TOP_LEVEL_KEY_MAP.get(key)
        if field_name is None:
            logger.warning("Ignoring unknown compdrive setting '%s'.", key)
            continue
        values[field_name] = _coerce_file_value(
            field_name=field_name,
            raw_value=raw_value,
            source=key,
        )


def _apply_env_overrides(values: dict[str, object]) -> None:
    for env_name, field_name in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        values[field_name] = _coerce_env_value(
            field_name=field_name,
            raw_value=raw_value,
            env_name=env_name,
        )


def _build_settings(values: dict[str, object]) -> DriverSettings:
    settings = DriverSettings(
        config_file_name=cast("str", values["config_file_name"]),
        new_line=cast("str", values["new_line"]).lower(),
        engine=cast("str", values["engine"]),
        locale_dir=cast("str", values["locale_dir"]),
        log_verbosity=cast("int", values["log_verbosity"]),
        log_json=cast("bool", values["log_json"]),
    )
    if settings.new_line not in _NEW_LINE_KINDS:
        raise ValueError(
            f"Invalid new_line: expected one of {sorted(_NEW_LINE_KINDS)}, "
            f"got {settings.new_line!r}."
        )
    if Path(settings.config_file_name).name != settings.config_file_name:
        raise ValueError(
            f"Invalid config_file_name: expected a bare file name, got "
            f"{settings.config_file_name!r}."
        )
    return settings


def load_settings(working_dir: Path | None = None) -> DriverSettings:
    """Load `.compdrive.toml` from `working_dir` and apply environment overrides."""

    values = _default_values()
    path = (working_dir or Path.cwd()) / SETTINGS_FILE_NAME
    if path.is_file():
        payload_obj = tomllib.loads(path.read_text(encoding="utf-8"))
        payload = cast("dict[str, object]", payload_obj)
        _apply_toml_payload(values=values, payload=payload, path=path)

    _apply_env_overrides(values)
    return _build_settings(values)
