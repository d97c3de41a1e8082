"""Locale validation and translated message catalog loading."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, cast

from compdrive.lib.messages import Messages, create_compiler_diagnostic, set_localized_messages

if TYPE_CHECKING:
    from collections.abc import Mapping

    from compdrive.lib.domain import Diagnostic
    from compdrive.lib.ports import LocaleLoader

logger = logging.getLogger(__name__)

_LOCALE_PATTERN = re.compile(r"^([a-z]+)(?:[_\-]([a-z]+))?$", re.IGNORECASE)
_BUILT_IN_LANGUAGE = "en"
_CATALOG_FILE_NAME = "diagnosticMessages.json"


class DirectoryLocaleLoader:
    """Load `<root>/<language>[-<territory>]/diagnosticMessages.json` catalogs.

    Catalog files map diagnostic codes (as strings) to translated templates.
    """

    def __init__(self, root: Path | None) -> None:
        self._root = root

    def load_messages(self, language: str, territory: str | None) -> Mapping[int, str] | None:
        if self._root is None:
            return None
        candidates = [language] if territory is None else [f"{language}-{territory}", language]
        for name in candidates:
            path = self._root / name / _CATALOG_FILE_NAME
            if not path.is_file():
                continue
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.warning("Ignoring unreadable message catalog '%s'.", path)
                continue
            if not isinstance(payload, dict):
                logger.warning("Ignoring malformed message catalog '%s'.", path)
                continue
            entries = cast("dict[str, object]", payload)
            return {
                int(code): text
                for code, text in entries.items()
                if code.isdigit() and isinstance(text, str)
            }
        return None


def validate_locale_and_set_language(
    locale: str,
    loader: LocaleLoader,
    errors: list[Diagnostic],
) -> bool:
    """Validate `locale` and install its catalog; problems go to `errors`."""

    match = _LOCALE_PATTERN.match(locale)
    if match is None:
        errors.append(create_compiler_diagnostic(Messages.LOCALE_FORM, "en", "ja-jp"))
        return False

    language = match.group(1).lower()
    territory = match.group(2).lower() if match.group(2) is not None else None
    if language == _BUILT_IN_LANGUAGE:
        set_localized_messages(None)
        return True

    catalog = loader.load_messages(language, territory)
    if catalog is None:
        errors.append(create_compiler_diagnostic(Messages.UNSUPPORTED_LOCALE, locale))
        return False

    set_localized_messages(catalog)
    return True
