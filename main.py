"""
Card Connectors — application entry point.

One process serves one connector, chosen by ``CONNECTOR`` (see
``config.settings``).
"""

from __future__ import annotations

import logging
import sys

import pathlib
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import build_router
from config.settings import config
from connectors.registry import ConnectorRegistry
from utils.validators import validate_connector

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "hpack"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

STATIC_DIR = pathlib.Path(__file__).resolve().parent / "static"


def create_app(
    connector_name: Optional[str] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the FastAPI app for one connector.

    Parameters
    ----------
    connector_name : provider slug; defaults to ``config.connector``
    transport      : httpx transport for backend calls (tests pass
                     ``httpx.MockTransport``)
    """
    name = connector_name or config.connector
    connector = ConnectorRegistry().get(name)
    if connector is None:
        raise RuntimeError(
            f"Unknown connector '{name}'. Available: {ConnectorRegistry().list_available()}"
        )
    validate_connector(connector)

    app = FastAPI(
        title=f"{connector.display_name} Connector",
        version=config.connector_version,
        description=f"Mobile-hub cards and actions for {connector.display_name}.",
    )
    app.state.connector = connector
    app.state.backend_transport = transport

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(build_router(connector))
    app.include_router(connector.router())

    images_dir = STATIC_DIR / connector.provider_name
    if images_dir.is_dir():
        app.mount("/images", StaticFiles(directory=str(images_dir)), name="images")
    else:
        logger.warning("No static images for %s at %s", connector.provider_name, images_dir)

    logger.info("%s connector ready (locales=%s)", connector.display_name, connector.messages.locales)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
