"""
SalesforceConnector: sender context cards for Salesforce CRM.

If the email sender is a known contact, the user gets a contact card plus
one card per open opportunity the contact is involved in.  Otherwise the
user gets one card per account they own whose existing contacts share the
sender's domain, offering to add the sender as a contact.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request

from api.dependencies import require_hub_auth
from backends.base import BackendClient
from connectors.base import (
    BaseConnector,
    CardContext,
    TokenField,
    read_form,
    required_field,
)
from connectors.salesforce import client
from connectors.salesforce.messages import MESSAGES
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

SENDER_EMAIL_REGEX = r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}"


def email_domain(email: str) -> str:
    """``jane@acme.com`` → ``@acme.com``."""
    return email[email.rfind("@"):] if "@" in email else ""


class SalesforceConnector(BaseConnector):
    """Contact, opportunity and account cards for the email sender."""

    def __init__(self) -> None:
        self._messages = MessageCatalog(MESSAGES)

    @property
    def provider_name(self) -> str:
        return "salesforce"

    @property
    def display_name(self) -> str:
        return "Salesforce"

    @property
    def messages(self) -> MessageCatalog:
        return self._messages

    @property
    def token_fields(self) -> List[TokenField]:
        return [
            TokenField("sender_email", regex=SENDER_EMAIL_REGEX),
            TokenField("user_email", env="USER_EMAIL"),
        ]

    @property
    def action_paths(self) -> List[str]:
        return [
            "accounts/{account_id}/contacts",
            "opportunity/{opportunity_id}/closedate",
            "opportunity/{opportunity_id}/nextstep",
        ]

    # ── Cards ────────────────────────────────────────────────────────────

    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        sender = request.first("sender_email")
        user_email = request.first("user_email")
        if not sender or not user_email:
            return []

        contact = await client.find_contact(ctx.backend, sender)
        if contact is not None:
            return await self._contact_cards(ctx, sender, contact)
        return await self._account_cards(ctx, sender, user_email)

    async def _contact_cards(self, ctx: CardContext, sender: str, contact: Dict[str, Any]) -> List[Card]:
        opportunity_ids = await client.contact_opportunity_ids(ctx.backend, sender)
        opportunities = await client.opportunity_details(ctx.backend, opportunity_ids)

        cards = [self._make_contact_card(ctx, sender, contact)]
        cards.extend(self._make_opportunity_card(ctx, opp) for opp in opportunities)
        return cards

    async def _account_cards(self, ctx: CardContext, sender: str, user_email: str) -> List[Card]:
        domain = email_domain(sender)
        if not domain:
            return []
        accounts = await client.accounts_for_domain(ctx.backend, domain, user_email)
        logger.debug("Sender %s is not a contact; %d candidate account(s)", sender, len(accounts))

        async def _card_for(account: Dict[str, Any]) -> Card:
            opportunities = await client.account_opportunities(ctx.backend, account["Id"])
            return self._make_account_card(ctx, sender, account, opportunities)

        return await self.fan_out(accounts, _card_for)

    def _make_contact_card(self, ctx: CardContext, sender: str, contact: Dict[str, Any]) -> Card:
        t = ctx.translate
        name = contact.get("Name", "")
        account = (contact.get("Account") or {}).get("Name", "")

        fields = [CardBodyField(title=t("contact.field.account.title"), description=account)]
        if contact.get("MobilePhone"):
            fields.append(CardBodyField(title=t("contact.field.phone.title"), description=contact["MobilePhone"]))

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("contact.header.title", name=name),
                subtitle=[t("contact.header.subtitle", account=account)],
            ),
            body=CardBody(description=t("contact.body.description", name=name, account=account), fields=fields),
            backend_id=sender,
        )

    def _make_opportunity_card(self, ctx: CardContext, opp: Dict[str, Any]) -> Card:
        t = ctx.translate
        opp_id = opp.get("Id", "")
        account = opp.get("Account") or {}
        account_name = account.get("Name", "")
        owner = (account.get("Owner") or {}).get("Name", "")

        fields = [
            CardBodyField(title=t("opportunity.field.owner.title"), description=owner),
            CardBodyField(title=t("opportunity.field.close_date.title"), description=opp.get("CloseDate") or ""),
            CardBodyField(title=t("opportunity.field.stage.title"), description=opp.get("StageName") or ""),
            CardBodyField(title=t("opportunity.field.amount.title"), description=opp.get("Amount") or ""),
            CardBodyField(
                title=t("opportunity.field.expected_revenue.title"),
                description=opp.get("ExpectedRevenue") or "",
            ),
        ]
        if opp.get("NextStep"):
            fields.append(CardBodyField(title=t("opportunity.field.next_step.title"), description=opp["NextStep"]))

        feeds = ((opp.get("Feeds") or {}).get("records")) or []
        comments = [
            {"author": (feed.get("InsertedBy") or {}).get("Name", ""), "text": feed.get("Body") or ""}
            for feed in feeds
            if feed.get("Body")
        ]
        if comments:
            fields.append(CardBodyField(type="COMMENT", title=t("opportunity.field.feed.title"), content=comments))

        base = f"opportunity/{opp_id}"
        actions = [
            CardAction(
                label=t("opportunity.action.closedate.label"),
                completed_label=t("opportunity.action.closedate.completed"),
                url=ctx.href(f"{base}/closedate"),
                action_key=ActionKey.USER_INPUT,
                user_input=[
                    CardActionInputField(
                        id="closedate",
                        label=t("opportunity.action.closedate.input.label"),
                        min_length=1,
                    )
                ],
            ),
            CardAction(
                label=t("opportunity.action.nextstep.label"),
                completed_label=t("opportunity.action.nextstep.completed"),
                url=ctx.href(f"{base}/nextstep"),
                action_key=ActionKey.USER_INPUT,
                user_input=[
                    CardActionInputField(
                        id="nextstep",
                        label=t("opportunity.action.nextstep.input.label"),
                        min_length=1,
                    )
                ],
            ),
        ]

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("opportunity.header.title", name=opp.get("Name", "")),
                subtitle=[t("opportunity.header.subtitle", account=account_name)],
            ),
            body=CardBody(description=t("opportunity.body.description", account=account_name), fields=fields),
            actions=actions,
            backend_id=opp_id,
        )

    def _make_account_card(
        self,
        ctx: CardContext,
        sender: str,
        account: Dict[str, Any],
        opportunities: List[Dict[str, Any]],
    ) -> Card:
        t = ctx.translate
        account_id = account["Id"]
        account_name = account.get("Name", "")

        fields = []
        if opportunities:
            fields.append(
                CardBodyField(
                    title=t("account.field.opportunities.title"),
                    content=[{"id": o.get("Id", ""), "name": o.get("Name", "")} for o in opportunities],
                )
            )

        add_contact = CardAction(
            label=t("account.action.add_contact.label"),
            completed_label=t("account.action.add_contact.completed"),
            url=ctx.href(f"accounts/{account_id}/contacts"),
            action_key=ActionKey.USER_INPUT,
            request={
                "contact_email": sender,
                "opportunity_ids": ",".join(o["Id"] for o in opportunities if o.get("Id")),
            },
            user_input=[
                CardActionInputField(id="first_name", label=t("account.action.add_contact.first_name.label")),
                CardActionInputField(
                    id="last_name",
                    label=t("account.action.add_contact.last_name.label"),
                    min_length=1,
                ),
            ],
            primary=True,
            remove_card_on_completion=True,
        )

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("account.header.title", account=account_name),
                subtitle=[t("account.header.subtitle", sender=sender)],
            ),
            body=CardBody(description=t("account.body.description", sender=sender, account=account_name), fields=fields),
            actions=[add_contact],
            backend_id=account_id,
        )

    # ── Actions ──────────────────────────────────────────────────────────

    def router(self) -> APIRouter:
        router = APIRouter(dependencies=[require_hub_auth])
        backend_dep = self.backend_dependency()

        @router.post("/accounts/{account_id}/contacts")
        async def add_contact(
            account_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            form = await read_form(request)
            email = required_field(form, "contact_email")
            last_name = required_field(form, "last_name")
            first_name = (form.get("first_name") or "").strip() or None
            opportunity_ids = _split_ids(form.get("opportunity_ids"))

            contact_id = await client.create_contact(backend, account_id, email, last_name, first_name)
            for opportunity_id in opportunity_ids:
                await client.link_opportunity(backend, contact_id, opportunity_id)
            return {"contact_id": contact_id, "opportunity_ids": opportunity_ids}

        @router.post("/opportunity/{opportunity_id}/closedate")
        async def update_close_date(
            opportunity_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            close_date = required_field(await read_form(request), "closedate")
            await client.update_opportunity(backend, opportunity_id, {"CloseDate": close_date})
            return {"opportunity_id": opportunity_id, "close_date": close_date}

        @router.post("/opportunity/{opportunity_id}/nextstep")
        async def update_next_step(
            opportunity_id: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Dict[str, Any]:
            next_step = required_field(await read_form(request), "nextstep")
            await client.update_opportunity(backend, opportunity_id, {"NextStep": next_step})
            return {"opportunity_id": opportunity_id, "next_step": next_step}

        return router


def _split_ids(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]
