"""
Locale resolution and message templating for card text.

Each connector ships a ``messages.py`` holding one catalog per locale::

    MESSAGES = {
        "en": {"card.header.title": "Approval request {number}"},
        "xx": {...},
    }

Unsupported locales fall back to the default locale, and keys missing from
a locale fall back to the default catalog.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from config.settings import config

logger = logging.getLogger(__name__)


def parse_accept_language(header: Optional[str]) -> List[str]:
    """
    Return language tags from an ``Accept-Language`` header, best first.

    ``"fr-CA;q=0.5, xx;q=1.0, *"`` → ``["xx", "*", "fr-ca"]``
    """
    if not header:
        return []
    weighted: List[Tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        quality = 1.0
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        weighted.append((-quality, index, tag.strip().lower()))
    return [tag for _, _, tag in sorted(weighted)]


def resolve_locale(
    accept_language: Optional[str],
    supported: Iterable[str],
    default: Optional[str] = None,
) -> str:
    """Pick the best supported locale for *accept_language*."""
    default = default or config.default_locale
    supported = [s.lower() for s in supported]
    for tag in parse_accept_language(accept_language):
        if tag in supported:
            return tag
        primary = tag.split("-", 1)[0]
        if primary in supported:
            return primary
    return default


class MessageCatalog:
    """Locale-aware lookup over a ``{locale: {key: template}}`` mapping."""

    def __init__(
        self,
        messages: Dict[str, Dict[str, str]],
        default_locale: Optional[str] = None,
    ):
        self._messages = messages
        self.default_locale = default_locale or config.default_locale
        if self.default_locale not in messages:
            raise ValueError(
                f"Default locale '{self.default_locale}' has no message catalog"
            )

    @property
    def locales(self) -> List[str]:
        return list(self._messages.keys())

    def missing_keys(self, locale: str) -> List[str]:
        """Default-locale keys that *locale* does not translate."""
        translated = self._messages.get(locale, {})
        return sorted(k for k in self._messages[self.default_locale] if k not in translated)

    def resolve(self, accept_language: Optional[str]) -> str:
        return resolve_locale(accept_language, self.locales, self.default_locale)

    def get(self, key: str, locale: Optional[str] = None, **params) -> str:
        catalog = self._messages.get(locale or self.default_locale, {})
        template = catalog.get(key)
        if template is None:
            template = self._messages[self.default_locale].get(key)
        if template is None:
            logger.warning("No message for key '%s'", key)
            return key
        return template.format(**params) if params else template

    def translator(self, locale: str) -> "Translator":
        return Translator(self, locale)


class Translator:
    """A MessageCatalog bound to one locale: ``t("key", name=...)``."""

    def __init__(self, catalog: MessageCatalog, locale: str):
        self.catalog = catalog
        self.locale = locale

    def __call__(self, key: str, **params) -> str:
        return self.catalog.get(key, self.locale, **params)
