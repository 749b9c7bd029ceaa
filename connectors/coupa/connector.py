"""
CoupaConnector: requisition approval cards.

The user's pending approvals are looked up by email; each approval of a
requisition becomes one card.  Coupa authenticates with an API key in
``X-COUPA-API-KEY``.  A key configured on the service (``coupa_api_key``)
is used in place of whatever the caller forwards.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request

from api.dependencies import require_hub_auth
from backends.base import BackendClient
from config.settings import config
from connectors.base import (
    BaseConnector,
    CardContext,
    TokenField,
    read_form,
    required_field,
)
from connectors.coupa import client
from connectors.coupa.messages import MESSAGES
from utils.i18n import MessageCatalog
from utils.schemas import (
    ActionKey,
    Card,
    CardAction,
    CardActionInputField,
    CardBody,
    CardBodyField,
    CardHeader,
    CardRequest,
)

logger = logging.getLogger(__name__)

_DECISION_SET = "decision"


class CoupaConnector(BaseConnector):
    """Approve / decline Coupa requisitions from a card."""

    def __init__(self) -> None:
        self._messages = MessageCatalog(MESSAGES)

    @property
    def provider_name(self) -> str:
        return "coupa"

    @property
    def display_name(self) -> str:
        return "Coupa"

    @property
    def messages(self) -> MessageCatalog:
        return self._messages

    @property
    def token_fields(self) -> List[TokenField]:
        return [TokenField("user_email", env="USER_EMAIL")]

    @property
    def auth_header(self) -> str:
        return "X-COUPA-API-KEY"

    @property
    def action_paths(self) -> List[str]:
        return [
            "api/v1/approvals/{approval_id}/approve",
            "api/v1/approvals/{approval_id}/reject",
        ]

    def resolve_authorization(self, authorization: Optional[str]) -> str:
        if config.coupa_api_key:
            return config.coupa_api_key
        return super().resolve_authorization(authorization)

    # ── Cards ────────────────────────────────────────────────────────────

    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        email = (ctx.principal.email if ctx.principal else None) or request.first("user_email")
        if not email:
            return []

        user_id = await client.find_user_id(ctx.backend, email)
        if not user_id:
            return []

        approvals = [
            a for a in await client.list_pending_approvals(ctx.backend, user_id)
            if a.get("approvable-type") == client.REQUISITION_TYPE
            and a.get("approvable-id")
            and a.get("id")
        ]

        async def _card_for(approval: Dict[str, Any]) -> Card:
            requisition = await client.get_requisition(ctx.backend, str(approval["approvable-id"]))
            return self._make_card(ctx, approval, requisition)

        return await self.fan_out(approvals, _card_for)

    def _make_card(self, ctx: CardContext, approval: Dict[str, Any], requisition: Dict[str, Any]) -> Card:
        t = ctx.translate
        approval_id = str(approval["id"])
        requisition_id = str(requisition.get("id", approval.get("approvable-id")))
        requested_by = requisition.get("requested-by") or {}
        requester = requested_by.get("fullname") or requested_by.get("email", "")
        currency = (requisition.get("currency") or {}).get("code", "")

        fields = [
            CardBodyField(
                title=t("card.field.total.title"),
                description=t("card.field.total.value", amount=requisition.get("total", ""), currency=currency),
            ),
        ]
        if requisition.get("justification"):
            fields.append(
                CardBodyField(title=t("card.field.justification.title"), description=requisition["justification"])
            )
        if requisition.get("submitted-at"):
            fields.append(CardBodyField(title=t("card.field.submitted.title"), description=requisition["submitted-at"]))
        lines = requisition.get("requisition-lines") or []
        if lines:
            fields.append(
                CardBodyField(
                    title=t("card.field.lines.title"),
                    content=[
                        {
                            "text": t(
                                "card.field.line.value",
                                description=line.get("description", ""),
                                quantity=line.get("quantity", ""),
                                price=line.get("unit-price", ""),
                            )
                        }
                        for line in lines
                    ],
                )
            )

        base = f"api/v1/approvals/{approval_id}"
        actions = [
            CardAction(
                label=t("card.action.approve.label"),
                completed_label=t("card.action.approve.completed"),
                url=ctx.href(f"{base}/approve"),
                action_key=ActionKey.USER_INPUT,
                user_input=[CardActionInputField(id="comment", label=t("card.action.approve.comment.label"))],
                primary=True,
                mutually_exclusive_set_id=_DECISION_SET,
                remove_card_on_completion=True,
            ),
            CardAction(
                label=t("card.action.reject.label"),
                completed_label=t("card.action.reject.completed"),
                url=ctx.href(f"{base}/reject"),
                action_key=ActionKey.USER_INPUT,
                user_input=[
                    CardActionInputField(id="reason", label=t("card.action.reject.reason.label"), min_length=1)
                ],
                mutually_exclusive_set_id=_DECISION_SET,
                remove_card_on_completion=True,
            ),
        ]

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("card.header.title", id=requisition_id),
                subtitle=[t("card.header.subtitle", requester=requester)],
            ),
            body=CardBody(
                description=t("card.body.description", requester=requester, id=requisition_id),
                fields=fields,
            ),
            actions=actions,
            backend_id=approval_id,
        )

    # ── Actions ──────────────────────────────────────────────────────────

    def router(self) -> APIRouter:
        router = APIRouter(prefix="/api/v1", dependencies=[require_hub_auth])
        backend_dep = self.backend_dependency()

        @router.post("/approvals/{approval_id}/approve")
        async def approve(
            approval_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            comment = ((await read_form(request)).get("comment") or "").strip()
            return await client.decide(backend, approval_id, "approve", comment)

        @router.post("/approvals/{approval_id}/reject")
        async def reject(
            approval_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            reason = required_field(await read_form(request), "reason")
            return await client.decide(backend, approval_id, "reject", reason)

        return router
