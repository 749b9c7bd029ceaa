"""
Routes shared by every connector — discovery metadata and card requests.

Action routes are contributed by each connector's own ``router()``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from api.dependencies import (
    accept_language,
    hub_principal,
    optional_routing_prefix,
    routing_prefix,
)
from api.errors import BackendError
from auth.jwt import HubPrincipal
from backends.base import BackendClient
from connectors.base import BaseConnector, CardContext
from utils.schemas import CardRequest, Cards

logger = logging.getLogger(__name__)


def build_router(connector: BaseConnector) -> APIRouter:
    """Discovery + ``POST /cards/requests`` bound to *connector*."""
    router = APIRouter(tags=[connector.provider_name])

    @router.get("/")
    @router.get("/discovery/metadata.json")
    async def discovery(prefix: str = Depends(optional_routing_prefix)) -> Dict[str, Any]:
        """Static connector metadata: token regexes, card endpoint, actions."""
        return connector.metadata(prefix)

    @router.post("/cards/requests", response_model=Cards)
    async def request_cards(
        card_request: Optional[CardRequest] = None,
        principal: Optional[HubPrincipal] = Depends(hub_principal),
        backend: BackendClient = Depends(connector.backend_dependency()),
        prefix: str = Depends(routing_prefix),
        language: Optional[str] = Depends(accept_language),
    ) -> Cards:
        """
        Map the request's tokens to cards.

        Empty or missing tokens give ``{"cards": []}``.  A backend 401 is
        reported as ``invalid_connector_token`` so the hub can re-prompt.
        """
        request = connector.prepare_request(card_request or CardRequest())
        locale = connector.messages.resolve(language)
        ctx = CardContext(
            backend=backend,
            routing_prefix=prefix,
            translate=connector.messages.translator(locale),
            principal=principal,
        )
        try:
            cards = await connector.build_cards(request, ctx)
        except BackendError as exc:
            if exc.unauthorized:
                raise exc.with_body({"error": "invalid_connector_token"})
            raise

        logger.info(
            "[%s] %d card(s) for tokens=%s locale=%s",
            connector.provider_name, len(cards), sorted(request.tokens), locale,
        )
        return Cards(cards=cards)

    return router
