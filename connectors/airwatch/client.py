"""
AirWatch device-services calls.
"""

from __future__ import annotations

import logging

from api.errors import BackendError, ConnectorRequestError
from backends.base import BackendClient

logger = logging.getLogger(__name__)


async def is_app_installed(backend: BackendClient, udid: str, bundle_id: str) -> bool:
    """
    Ask AirWatch whether *bundle_id* is installed on device *udid*.

    Raises
    ------
    ConnectorRequestError – the device is unknown (404) or not the caller's (403)
    BackendError          – any other backend failure
    """
    try:
        payload = await backend.get_json(
            "/deviceservices/AppInstallationStatus",
            params={"Udid": udid, "BundleId": bundle_id},
        )
    except BackendError as exc:
        if exc.backend_status == 404:
            raise ConnectorRequestError(f"Unknown device UDID '{udid}'") from exc
        if exc.backend_status == 403:
            raise ConnectorRequestError(f"Device UDID '{udid}' is not accessible to this user") from exc
        raise
    installed = bool((payload or {}).get("IsApplicationInstalled"))
    logger.debug("App %s on %s installed=%s", bundle_id, udid, installed)
    return installed
