"""
ServiceNowConnector — catalog-request approval cards.

Cards are built for the requested tickets (``ticket_id`` tokens such as
``REQ0010001``) that are awaiting approval by the hub user (``email``
token).  Approve / reject PATCH the underlying sysapproval_approver row.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request

from api.dependencies import require_hub_auth
from api.errors import NotFoundError
from backends.base import BackendClient
from connectors.base import (
    BaseConnector,
    CardContext,
    TokenField,
    read_form,
    required_field,
)
from connectors.servicenow import client
from connectors.servicenow.messages import MESSAGES
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

# "REQ" + exactly seven digits, not glued to other letters or digits.
TICKET_ID_REGEX = r"\b(REQ\d{7})\b"

_REJECT_SET = "approval"


class ServiceNowConnector(BaseConnector):
    """Approval cards for ServiceNow service-catalog requests."""

    def __init__(self) -> None:
        self._messages = MessageCatalog(MESSAGES)

    @property
    def provider_name(self) -> str:
        return "servicenow"

    @property
    def display_name(self) -> str:
        return "ServiceNow"

    @property
    def messages(self) -> MessageCatalog:
        return self._messages

    @property
    def token_fields(self) -> List[TokenField]:
        return [
            TokenField("ticket_id", regex=TICKET_ID_REGEX, capture_group=1),
            TokenField("email", env="USER_EMAIL"),
        ]

    @property
    def action_paths(self) -> List[str]:
        return [
            "api/v1/tickets/{ticket_id}/approve",
            "api/v1/tickets/{ticket_id}/reject",
        ]

    # ── Cards ────────────────────────────────────────────────────────────

    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        ticket_ids = set(request.token("ticket_id"))
        email = request.first("email")
        if not ticket_ids or not email:
            return []

        user_id = await client.find_user_id(ctx.backend, email)
        if not user_id:
            return []

        approvals = await client.list_pending_approvals(ctx.backend, user_id)

        async def _card_for(approval: Dict[str, Any]) -> Optional[Card]:
            request_id = client.reference_id(approval.get("sysapproval"))
            if not request_id or not approval.get("sys_id"):
                return None
            sc_request = await client.get_request(ctx.backend, request_id)
            if sc_request.get("number") not in ticket_ids:
                return None
            items = await client.list_request_items(ctx.backend, request_id)
            return self._make_card(ctx, approval, sc_request, items)

        return await self.fan_out(approvals, _card_for)

    def _make_card(
        self,
        ctx: CardContext,
        approval: Dict[str, Any],
        sc_request: Dict[str, Any],
        items: List[Dict[str, Any]],
    ) -> Card:
        t = ctx.translate
        approval_id = approval["sys_id"]
        number = sc_request.get("number", "")
        created_by = approval.get("sys_created_by", "")

        fields = [
            CardBodyField(title=t("card.field.total.title"), description=str(sc_request.get("price", ""))),
            CardBodyField(title=t("card.field.created_by.title"), description=created_by),
        ]
        if approval.get("due_date"):
            fields.append(CardBodyField(title=t("card.field.due_date.title"), description=approval["due_date"]))
        if approval.get("comments"):
            fields.append(
                CardBodyField(type="COMMENT", title=t("card.field.comments.title"), description=approval["comments"])
            )
        if items:
            fields.append(
                CardBodyField(
                    title=t("card.field.items.title"),
                    content=[
                        {
                            "text": t(
                                "card.field.item.line",
                                description=item.get("short_description", ""),
                                quantity=item.get("quantity", ""),
                                price=item.get("price", ""),
                            )
                        }
                        for item in items
                    ],
                )
            )

        actions = [
            CardAction(
                label=t("card.action.approve.label"),
                completed_label=t("card.action.approve.completed"),
                url=ctx.href(f"api/v1/tickets/{approval_id}/approve"),
                action_key=ActionKey.DIRECT,
                primary=True,
                mutually_exclusive_set_id=_REJECT_SET,
                remove_card_on_completion=True,
            ),
            CardAction(
                label=t("card.action.reject.label"),
                completed_label=t("card.action.reject.completed"),
                url=ctx.href(f"api/v1/tickets/{approval_id}/reject"),
                action_key=ActionKey.USER_INPUT,
                user_input=[
                    CardActionInputField(
                        id="reason",
                        label=t("card.action.reject.reason.label"),
                        format="textarea",
                        min_length=1,
                    )
                ],
                mutually_exclusive_set_id=_REJECT_SET,
                remove_card_on_completion=True,
            ),
        ]

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("card.header.title"),
                subtitle=[t("card.header.subtitle", number=number)],
            ),
            body=CardBody(
                description=t("card.body.description", created_by=created_by, number=number),
                fields=fields,
            ),
            actions=actions,
            backend_id=approval_id,
        )

    # ── Actions ──────────────────────────────────────────────────────────

    def router(self) -> APIRouter:
        router = APIRouter(prefix="/api/v1", dependencies=[require_hub_auth])
        backend_dep = self.backend_dependency()

        @router.post("/tickets/{ticket_id}/approve")
        async def approve(
            ticket_id: str,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            result = await client.update_approval(backend, ticket_id, "approved")
            return _action_result(result)

        @router.post("/tickets/{ticket_id}/reject")
        async def reject(
            ticket_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            reason = required_field(await read_form(request), "reason")
            result = await client.update_approval(backend, ticket_id, "rejected", comments=reason)
            return _action_result(result)

        @router.get("/tasks/{number}")
        async def task_details(
            number: str,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            task = await client.get_task(backend, number)
            if task is None:
                raise NotFoundError(f"Task {number} not found")
            return task.model_dump()

        return router


def _action_result(result: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "approval_sys_id": result.get("sys_id"),
        "approval_state": result.get("state"),
        "comments": result.get("comments"),
    }
