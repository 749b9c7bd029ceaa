"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

import httpx
from fastapi import Depends, Header, Request

from api.errors import MissingHeaderError
from auth.jwt import HubPrincipal, verify_hub_token
from config.settings import config

AUTH_HEADER = "X-Connector-Authorization"
BASE_URL_HEADER = "X-Connector-Base-Url"
ROUTING_PREFIX_HEADER = "X-Routing-Prefix"


async def get_http_client(request: Request) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    One ``httpx.AsyncClient`` per incoming request.

    ``app.state.backend_transport`` lets tests swap in ``httpx.MockTransport``.
    """
    transport = getattr(request.app.state, "backend_transport", None)
    async with httpx.AsyncClient(
        transport=transport,
        timeout=config.http_timeout_seconds,
    ) as client:
        yield client


async def connector_authorization(
    authorization: Optional[str] = Header(None, alias=AUTH_HEADER),
) -> str:
    """Caller credential forwarded to the backend.  Missing → 400."""
    if not authorization or not authorization.strip():
        raise MissingHeaderError(AUTH_HEADER)
    return authorization.strip()


async def optional_connector_authorization(
    authorization: Optional[str] = Header(None, alias=AUTH_HEADER),
) -> Optional[str]:
    if authorization and authorization.strip():
        return authorization.strip()
    return None


async def backend_base_url(
    base_url: Optional[str] = Header(None, alias=BASE_URL_HEADER),
) -> str:
    if not base_url or not base_url.strip():
        raise MissingHeaderError(BASE_URL_HEADER)
    return base_url.strip()


async def routing_prefix(
    prefix: Optional[str] = Header(None, alias=ROUTING_PREFIX_HEADER),
) -> str:
    if not prefix or not prefix.strip():
        raise MissingHeaderError(ROUTING_PREFIX_HEADER)
    prefix = prefix.strip()
    return prefix if prefix.endswith("/") else prefix + "/"


async def optional_routing_prefix(
    request: Request,
    prefix: Optional[str] = Header(None, alias=ROUTING_PREFIX_HEADER),
) -> str:
    """Routing prefix when given, else this service's own base URL."""
    value = (prefix or "").strip() or str(request.base_url)
    return value if value.endswith("/") else value + "/"


async def accept_language(
    language: Optional[str] = Header(None, alias="Accept-Language"),
) -> Optional[str]:
    return language


async def hub_principal(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Optional[HubPrincipal]:
    """
    Verify the hub's bearer token when hub authentication is enabled.

    Returns ``None`` when ``config.hub_auth_secret`` is empty.
    """
    if not config.hub_auth_secret:
        return None
    return verify_hub_token(authorization)


# Applied to every protected route of a connector.
require_hub_auth = Depends(hub_principal)
