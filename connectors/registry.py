"""
ConnectorRegistry — maps provider slugs to connector instances.

Connectors are instantiated on first discovery, so catalogs and message
files are only loaded once per process.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Type

from connectors.airwatch.connector import AirWatchConnector
from connectors.base import BaseConnector
from connectors.coupa.connector import CoupaConnector
from connectors.gitlab_pr.connector import GitlabPrConnector
from connectors.salesforce.connector import SalesforceConnector
from connectors.servicenow.connector import ServiceNowConnector

logger = logging.getLogger(__name__)

# ── Connector types, in discovery order ──────────────────────────────────

CONNECTOR_TYPES: List[Type[BaseConnector]] = [
    ServiceNowConnector,
    GitlabPrConnector,
    SalesforceConnector,
    AirWatchConnector,
    CoupaConnector,
]


class ConnectorRegistry:
    """Singleton registry for all card connectors."""

    _instance: Optional["ConnectorRegistry"] = None

    def __new__(cls) -> "ConnectorRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._connectors = {}
            cls._instance._discovered = False
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget every instance (tests)."""
        cls._instance = None

    def discover(self) -> None:
        """Instantiate every connector type once."""
        if self._discovered:
            return
        for connector_type in CONNECTOR_TYPES:
            conn = connector_type()
            if conn.provider_name in self._connectors:
                raise RuntimeError(f"Duplicate connector provider '{conn.provider_name}'")
            self._connectors[conn.provider_name] = conn
            logger.debug("Connector available: %s (%s)", conn.display_name, conn.provider_name)
        self._discovered = True

    def get(self, provider: str) -> Optional[BaseConnector]:
        self.discover()
        return self._connectors.get(provider)

    def list_available(self) -> List[str]:
        self.discover()
        return list(self._connectors)
