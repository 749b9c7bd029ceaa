"""
Connector error types and the FastAPI handlers that render them.

Every backend failure is surfaced immediately; the backend status is echoed
in ``X-Backend-Status`` so the hub can tell an expired credential (401,
rendered as 400) from a backend outage (5xx).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BACKEND_STATUS_HEADER = "X-Backend-Status"


class ConnectorError(Exception):
    """Base class — a client-facing failure with a JSON body."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, body: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self._body = body

    @property
    def body(self) -> Any:
        if self._body is not None:
            return self._body
        return {"message": self.message}

    def headers(self) -> Dict[str, str]:
        return {}


class MissingHeaderError(ConnectorError):
    def __init__(self, header: str):
        super().__init__(f"Missing request header '{header}'")
        self.header = header


class ActionValidationError(ConnectorError):
    """A required action form field is missing or blank."""

    @classmethod
    def missing_field(cls, field: str) -> "ActionValidationError":
        return cls(f"Missing required field '{field}'")


class ConnectorRequestError(ConnectorError):
    """The request is well-formed but cannot be served (bad platform, UDID…)."""


class NotFoundError(ConnectorError):
    status_code = status.HTTP_404_NOT_FOUND


class BackendError(ConnectorError):
    """A non-2xx response from the third-party backend."""

    def __init__(self, backend_status: int, body: Optional[Any] = None, url: str = ""):
        super().__init__(f"Backend responded {backend_status} for {url}", body=body)
        self.backend_status = backend_status
        self.url = url

    @property
    def unauthorized(self) -> bool:
        return self.backend_status == status.HTTP_401_UNAUTHORIZED

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.unauthorized:
            return status.HTTP_400_BAD_REQUEST
        if self.backend_status >= 500:
            return self.backend_status
        return status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def body(self) -> Any:
        if self._body not in (None, ""):
            return self._body
        return {"message": self.message}

    def headers(self) -> Dict[str, str]:
        return {BACKEND_STATUS_HEADER: str(self.backend_status)}

    def with_body(self, body: Any) -> "BackendError":
        return BackendError(self.backend_status, body=body, url=self.url)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers that render connector errors as JSON."""

    @app.exception_handler(ConnectorError)
    async def connector_error_handler(request: Request, exc: ConnectorError):
        if isinstance(exc, BackendError):
            logger.warning(
                "%s %s — backend %d (%s)",
                request.method, request.url.path, exc.backend_status, exc.url,
            )
        else:
            logger.info("%s %s — %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.body,
            headers=exc.headers(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Malformed request", "detail": jsonable_encoder(exc.errors())},
        )
