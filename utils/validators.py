"""
Startup validators.
"""

from __future__ import annotations

import logging
import re

from connectors.base import BaseConnector

logger = logging.getLogger(__name__)


def validate_connector(connector: BaseConnector) -> None:
    """
    Called once at startup.  Verify that every token regex compiles, that
    its capture group exists, and that every locale shipped carries the
    default locale's message keys.
    """
    name = connector.provider_name
    for field in connector.token_fields:
        if field.regex is None:
            if not field.env:
                raise RuntimeError(f"Startup validation failed — '{name}' token '{field.name}' has no source")
            continue
        try:
            pattern = re.compile(field.regex)
        except re.error as exc:
            raise RuntimeError(
                f"Startup validation failed — '{name}' token '{field.name}' regex is invalid: {exc}"
            ) from exc
        if field.capture_group > pattern.groups:
            raise RuntimeError(
                f"Startup validation failed — '{name}' token '{field.name}' has no "
                f"capture group {field.capture_group}"
            )

    catalog = connector.messages
    for locale in catalog.locales:
        missing = catalog.missing_keys(locale)
        if missing:
            logger.warning("[%s] locale '%s' lacks %d message(s): %s", name, locale, len(missing), missing)

    logger.info("Connector '%s' validated", name)
