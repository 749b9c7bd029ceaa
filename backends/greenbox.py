"""
GreenboxClient: installs entitled apps through the app catalog portal.

The portal is driven with cookies rather than bearer tokens:

1. ``POST /catalog-portal/services/auth/eucTokens`` with ``HZN=<identity token>``
   returns an EUC token for the device.
2. ``GET /catalog-portal/services`` with ``USER_CATALOG_CONTEXT=<euc token>``
   sets the ``EUC_XSRF_TOKEN`` cookie.
3. ``GET /catalog-portal/services/api/entitlements?q=<app name>`` finds the app.
4. ``POST`` to the entitlement's install link (both cookies plus the
   ``X-XSRF-TOKEN`` header) triggers the install.

Cookies live in the jar of the request-scoped ``httpx.AsyncClient``, so the
XSRF cookie set by step 2 is replayed on the later calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from api.errors import ConnectorRequestError
from backends.base import BackendClient

logger = logging.getLogger(__name__)

_PORTAL = "/catalog-portal/services"

HZN_COOKIE = "HZN"
EUC_COOKIE = "USER_CATALOG_CONTEXT"
XSRF_COOKIE = "EUC_XSRF_TOKEN"
XSRF_HEADER = "X-XSRF-TOKEN"

DEVICE_TYPES = {"android": "android", "ios": "Apple"}


@dataclass(frozen=True)
class GreenboxSession:
    euc_token: str
    csrf_token: Optional[str] = None


def _bare_token(authorization: str) -> str:
    """``Bearer abc`` → ``abc``."""
    if authorization.lower().startswith("bearer "):
        return authorization[len("bearer "):].strip()
    return authorization.strip()


class GreenboxClient:
    """App catalog session for one device on behalf of one user."""

    def __init__(self, http: httpx.AsyncClient, base_url: str, authorization: str):
        self.identity_token = _bare_token(authorization)
        # No bearer header; the portal authenticates by cookie.
        self._backend = BackendClient(http, base_url, None, name="greenbox")
        self._cookies = http.cookies

    async def open_session(self, udid: str, platform: str) -> GreenboxSession:
        device_type = DEVICE_TYPES.get(platform.lower())
        if device_type is None:
            raise ConnectorRequestError(f"Invalid platform '{platform}'")

        self._cookies.set(HZN_COOKIE, self.identity_token)
        try:
            resp = await self._backend.request(
                "POST",
                f"{_PORTAL}/auth/eucTokens",
                params={"deviceUdid": udid, "deviceType": device_type},
            )
        finally:
            self._cookies.delete(HZN_COOKIE)
        euc_token = (resp.json() or {}).get("eucToken")
        if not euc_token:
            raise ConnectorRequestError("App catalog did not issue a device token")

        self._cookies.set(EUC_COOKIE, euc_token)
        resp = await self._backend.request("GET", _PORTAL)
        csrf_token = resp.cookies.get(XSRF_COOKIE)
        logger.debug("Greenbox session opened for device %s (csrf=%s)", udid, bool(csrf_token))
        return GreenboxSession(euc_token=euc_token, csrf_token=csrf_token)

    async def search_entitlements(self, app_name: str) -> List[Dict[str, Any]]:
        resp = await self._backend.request(
            "GET",
            f"{_PORTAL}/api/entitlements",
            params={"q": app_name},
        )
        payload = resp.json() if resp.content else {}
        return ((payload or {}).get("_embedded") or {}).get("entitlements") or []

    async def install(self, session: GreenboxSession, app_name: str) -> Any:
        """
        Install the single entitlement matching *app_name*.

        Raises
        ------
        ConnectorRequestError – zero or several entitlements match
        """
        entitlements = await self.search_entitlements(app_name)
        if len(entitlements) != 1:
            logger.info("App '%s' matched %d entitlements", app_name, len(entitlements))
            raise ConnectorRequestError(
                f"Expected exactly one app named '{app_name}', found {len(entitlements)}"
            )

        href = ((entitlements[0].get("_links") or {}).get("install") or {}).get("href")
        if not href:
            raise ConnectorRequestError(f"App '{app_name}' cannot be installed from the catalog")

        headers = {}
        if session.csrf_token:
            headers[XSRF_HEADER] = session.csrf_token
        resp = await self._backend.request("POST", href, headers=headers)
        logger.info("Install triggered for '%s'", app_name)
        return resp.json() if resp.content else {}
