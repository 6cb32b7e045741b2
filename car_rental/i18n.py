"""
Translation bundles for the localized site.

Bundles are JSON files shipped in ``car_rental/locales`` (one per locale),
nested by page. Keys are addressed with dots, e.g. ``search.noResults``.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from car_rental.config import DEFAULT_LOCALE, SUPPORTED_LOCALES

LOCALES_DIR = Path(__file__).parent / "locales"


def is_supported(locale: str) -> bool:
    return locale in SUPPORTED_LOCALES


@lru_cache(maxsize=None)
def load_bundle(locale: str) -> dict[str, Any]:
    """
    Load the translation bundle of a supported locale.

    Args:
        locale: Locale code (``en`` or ``ru``)

    Returns:
        dict: Nested translation messages

    Raises:
        KeyError: If the locale is not supported
    """
    if not is_supported(locale):
        raise KeyError(f"Unsupported locale: {locale}")
    with open(LOCALES_DIR / f"{locale}.json", encoding="utf-8") as fh:
        return json.load(fh)


def translate(locale: str, key: str) -> str:
    """
    Resolve a dotted key, falling back to the default locale, then the key itself.

    Example:
        >>> translate("ru", "nav.home")
        'Главная'
    """
    for candidate in (locale, DEFAULT_LOCALE):
        node: Any = load_bundle(candidate)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                node = None
                break
            node = node[part]
        if isinstance(node, str):
            return node
    return key


def section(locale: str, name: str) -> dict[str, Any]:
    """Return one top-level section of a bundle (e.g. ``home``), or an empty dict."""
    return dict(load_bundle(locale).get(name, {}))
