"""
AirWatchConnector: "install this app" cards for managed devices.

App keywords found in the email (``boxer``, ``concur``, …) are mapped to the
managed-app catalog; for every app not yet installed on the user's device
(``udid`` / ``platform`` tokens) the connector offers an install action that
goes through the app catalog portal (see ``backends.greenbox``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, Request

from api.dependencies import connector_authorization, get_http_client, require_hub_auth
from api.errors import ConnectorRequestError
from backends.greenbox import GreenboxClient
from config.app_catalog import PLATFORMS, AppCatalog, ManagedApp
from config.settings import config
from connectors.airwatch import client
from connectors.airwatch.messages import MESSAGES
from connectors.base import (
    BaseConnector,
    CardContext,
    TokenField,
    read_form,
    required_field,
)
from utils.i18n import MessageCatalog
from utils.schemas import (
    ActionKey,
    Card,
    CardAction,
    CardBody,
    CardBodyField,
    CardHeader,
    CardRequest,
)

logger = logging.getLogger(__name__)


def validate_platform(platform: str) -> str:
    """Lower-cased platform, or ``ConnectorRequestError`` if unsupported."""
    value = platform.strip().lower()
    if value not in PLATFORMS:
        raise ConnectorRequestError(f"Invalid platform '{platform}'")
    return value


class AirWatchConnector(BaseConnector):
    """Install cards for managed apps mentioned in an email."""

    def __init__(self, catalog: Optional[AppCatalog] = None) -> None:
        self._messages = MessageCatalog(MESSAGES)
        self.catalog = catalog or AppCatalog(config.managed_apps_file or None)

    @property
    def provider_name(self) -> str:
        return "airwatch"

    @property
    def display_name(self) -> str:
        return "AirWatch"

    @property
    def messages(self) -> MessageCatalog:
        return self._messages

    @property
    def token_fields(self) -> List[TokenField]:
        return [
            TokenField("app_keywords", regex=self.catalog.keyword_regex(), capture_group=1),
            TokenField("udid", env="DEVICE_UDID"),
            TokenField("platform", env="DEVICE_PLATFORM"),
        ]

    @property
    def action_paths(self) -> List[str]:
        return ["mdm/app/install"]

    # ── Cards ────────────────────────────────────────────────────────────

    def resolve_apps(self, keywords: List[str]) -> List[ManagedApp]:
        """Keywords → distinct catalog apps, first mention first."""
        apps: Dict[str, ManagedApp] = {}
        for keyword in keywords:
            app = self.catalog.find_by_keyword(keyword)
            if app is None:
                logger.debug("No managed app for keyword '%s'", keyword)
                continue
            apps.setdefault(app.app_id, app)
        return list(apps.values())

    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        keywords = request.token("app_keywords")
        udid = request.first("udid")
        platform = request.first("platform")
        if not keywords or not udid or not platform:
            return []
        platform = validate_platform(platform)

        targets = []
        for app in self.resolve_apps(keywords):
            bundle_id = app.bundle_id(platform)
            if bundle_id is None:
                logger.debug("App %s is not managed on %s", app.app_id, platform)
                continue
            targets.append((app, bundle_id))

        async def _card_for(target) -> Optional[Card]:
            app, bundle_id = target
            if await client.is_app_installed(ctx.backend, udid, bundle_id):
                return None
            return self._make_card(ctx, app, bundle_id, udid, platform)

        return await self.fan_out(targets, _card_for)

    def _make_card(self, ctx: CardContext, app: ManagedApp, bundle_id: str, udid: str, platform: str) -> Card:
        t = ctx.translate
        install = CardAction(
            label=t("card.action.install.label"),
            completed_label=t("card.action.install.completed"),
            url=ctx.href("mdm/app/install"),
            action_key=ActionKey.DIRECT,
            request={"app_name": app.name, "udid": udid, "platform": platform},
            primary=True,
            remove_card_on_completion=True,
        )
        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("card.header.title", app=app.name),
                subtitle=[t("card.header.subtitle")],
            ),
            body=CardBody(
                description=t("card.body.description", app=app.name),
                fields=[
                    CardBodyField(title=t("card.field.platform.title"), description=platform),
                    CardBodyField(title=t("card.field.bundle.title"), description=bundle_id),
                ],
            ),
            actions=[install],
            backend_id=bundle_id,
        )

    # ── Actions ──────────────────────────────────────────────────────────

    def router(self) -> APIRouter:
        router = APIRouter(prefix="/mdm", dependencies=[require_hub_auth])

        @router.post("/app/install")
        async def install_app(
            request: Request,
            http: httpx.AsyncClient = Depends(get_http_client),
            authorization: str = Depends(connector_authorization),
        ) -> Any:
            form = await read_form(request)
            app_name = required_field(form, "app_name")
            udid = required_field(form, "udid")
            platform = validate_platform(required_field(form, "platform"))
            if not config.greenbox_url:
                raise ConnectorRequestError("App catalog URL is not configured")

            greenbox = GreenboxClient(http, config.greenbox_url, authorization)
            session = await greenbox.open_session(udid, platform)
            return await greenbox.install(session, app_name)

        return router
