"""
BackendClient — thin authenticated REST wrapper around ``httpx.AsyncClient``.

Token pass-through pattern: the caller's credential and backend base URL
arrive as request headers and are forwarded verbatim on every call.  The
``httpx.AsyncClient`` is owned by the request (see
``api.dependencies.get_http_client``); this class never opens or closes it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from api.errors import BackendError

logger = logging.getLogger(__name__)


def _response_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text[:2000]


class BackendClient:
    """Issue calls against one backend on behalf of one caller."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        authorization: Optional[str],
        auth_header: str = "Authorization",
        name: str = "backend",
    ):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.authorization = authorization
        self.auth_header = auth_header
        self.name = name

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.authorization:
            headers[self.auth_header] = self.authorization
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send one request; raise ``BackendError`` for any non-2xx status.

        Raises
        ------
        BackendError – backend answered outside 2xx (body preserved)
        """
        url = self.url(path)
        resp = await self.http.request(
            method,
            url,
            params=params,
            json=json,
            headers=self._headers(headers),
        )
        if resp.status_code >= 400 or resp.status_code < 200:
            body = _response_body(resp)
            logger.error(
                "[%s] %s %s → %d body=%s",
                self.name, method, url, resp.status_code, body,
            )
            raise BackendError(resp.status_code, body=body, url=url)
        logger.debug("[%s] %s %s → %d", self.name, method, url, resp.status_code)
        return resp

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self.request("GET", path, params=params)
        return _response_body(resp) if resp.content else None

    async def send_json(
        self,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        resp = await self.request(method, path, params=params, json=payload)
        return _response_body(resp) if resp.content else None
