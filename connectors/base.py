"""
BaseConnector — abstract interface for all card connectors.

Every backend (ServiceNow, GitLab, Salesforce, …) subclasses this and
implements identity, token fields, card building and action routes.
The shared card endpoint and discovery document live in ``api.routes``.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

import httpx
from fastapi import APIRouter, Depends, Request

from api.dependencies import (
    AUTH_HEADER,
    backend_base_url,
    get_http_client,
    optional_connector_authorization,
)
from api.errors import ActionValidationError, MissingHeaderError
from auth.jwt import HubPrincipal
from backends.base import BackendClient
from config.settings import config
from utils.i18n import MessageCatalog, Translator
from utils.schemas import Card, CardBody, CardHeader, CardRequest, Link
from utils.token_extractor import extract_tokens

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TokenField:
    """
    A card-request token as published in discovery metadata.

    Either ``regex`` (the hub extracts it from email text) or ``env`` (the
    hub fills it from its own context, e.g. the user's email) is set.
    """

    name: str
    regex: Optional[str] = None
    capture_group: int = 0
    env: Optional[str] = None

    def as_metadata(self) -> Dict[str, Any]:
        if self.regex is not None:
            return {"regex": self.regex, "capture_group": self.capture_group}
        return {"env": self.env}


@dataclass
class CardContext:
    """Everything a connector needs to turn one card request into cards."""

    backend: BackendClient
    routing_prefix: str
    translate: Translator
    principal: Optional[HubPrincipal] = None

    @property
    def locale(self) -> str:
        return self.translate.locale

    def href(self, path: str) -> Link:
        return Link(href=self.routing_prefix + path.lstrip("/"))


class BaseConnector(ABC):
    """Abstract base for all card connectors."""

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'servicenow', 'gitlab-pr', 'salesforce', …"""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable: 'ServiceNow', 'GitLab', …"""
        ...

    @property
    @abstractmethod
    def messages(self) -> MessageCatalog:
        """Localized card text."""
        ...

    @property
    @abstractmethod
    def token_fields(self) -> List[TokenField]:
        """Tokens this connector reads from a card request."""
        ...

    @property
    def auth_header(self) -> str:
        """Header used to forward the caller's credential to the backend."""
        return "Authorization"

    @property
    def action_paths(self) -> List[str]:
        """Action URL templates advertised in discovery metadata."""
        return []

    # ── Cards & actions ─────────────────────────────────────────────────

    @abstractmethod
    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        """
        Look up backend records for the request's tokens and map them to cards.

        Returns an empty list when the tokens needed are missing or empty.
        """
        ...

    @abstractmethod
    def router(self) -> APIRouter:
        """Action routes (approve / reject / comment / …)."""
        ...

    # ── Backend access ──────────────────────────────────────────────────

    def resolve_authorization(self, authorization: Optional[str]) -> str:
        """Credential to forward; connectors with a service credential override this."""
        if not authorization:
            raise MissingHeaderError(AUTH_HEADER)
        return authorization

    def backend_client(self, http: httpx.AsyncClient, base_url: str, authorization: str) -> BackendClient:
        return BackendClient(
            http,
            base_url,
            authorization,
            auth_header=self.auth_header,
            name=self.provider_name,
        )

    def backend_dependency(self) -> Callable[..., Awaitable[BackendClient]]:
        """FastAPI dependency producing a ``BackendClient`` for this connector."""

        async def _backend(
            http: httpx.AsyncClient = Depends(get_http_client),
            authorization: Optional[str] = Depends(optional_connector_authorization),
            base_url: str = Depends(backend_base_url),
        ) -> BackendClient:
            return self.backend_client(http, base_url, self.resolve_authorization(authorization))

        return _backend

    # ── Tokens ──────────────────────────────────────────────────────────

    def extract_tokens(self, text: Optional[str]) -> Dict[str, List[str]]:
        """Apply every regex token field to *text*."""
        return {
            f.name: extract_tokens(f.regex, text, f.capture_group)
            for f in self.token_fields
            if f.regex is not None
        }

    def prepare_request(self, request: CardRequest) -> CardRequest:
        """Fill tokens missing from the request from its raw email text."""
        if not request.email:
            return request
        tokens = dict(request.tokens)
        for name, values in self.extract_tokens(request.email).items():
            if not tokens.get(name):
                tokens[name] = values
        return CardRequest(tokens=tokens, email=request.email)

    # ── Discovery ───────────────────────────────────────────────────────

    def metadata(self, prefix: str) -> Dict[str, Any]:
        return {
            "name": self.provider_name,
            "display_name": self.display_name,
            "version": config.connector_version,
            "image": {"href": prefix + "images/connector.png"},
            "object_types": {
                "card": {
                    "endpoint": {"href": prefix + "cards/requests"},
                    "fields": {f.name: f.as_metadata() for f in self.token_fields},
                    "locales": self.messages.locales,
                },
            },
            "actions": [prefix + p.lstrip("/") for p in self.action_paths],
        }

    # ── Helpers ─────────────────────────────────────────────────────────

    def new_card(
        self,
        ctx: CardContext,
        header: CardHeader,
        body: Optional[CardBody] = None,
        actions: Optional[list] = None,
        backend_id: Optional[str] = None,
    ) -> Card:
        card = Card(
            name=self.display_name,
            header=header,
            body=body or CardBody(),
            actions=actions or [],
            image=ctx.href("images/connector.png"),
            backend_id=backend_id,
        )
        return card.sealed()

    @staticmethod
    async def fan_out(
        items: Iterable[T],
        fn: Callable[[T], Awaitable[Any]],
    ) -> List[Card]:
        """
        Run *fn* for every item concurrently and flatten the results.

        ``fn`` may return a Card, a list of Cards, or None (no card).
        The first exception propagates after the remaining lookups are
        cancelled, so no backend call outlives the request.
        """
        tasks = [asyncio.ensure_future(fn(item)) for item in items]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        cards: List[Card] = []
        for result in results:
            if result is None:
                continue
            if isinstance(result, list):
                cards.extend(result)
            else:
                cards.append(result)
        return cards


# ── Form helpers for action routes ─────────────────────────────────────


async def read_form(request: Request) -> Dict[str, str]:
    """Form-encoded action body as a plain dict (last value wins)."""
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def required_field(form: Dict[str, str], name: str) -> str:
    """Return a non-blank form value or raise ``ActionValidationError``."""
    value = (form.get(name) or "").strip()
    if not value:
        raise ActionValidationError.missing_field(name)
    return value
