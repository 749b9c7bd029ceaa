"""
GitlabPrConnector — merge-request cards for GitLab.

One card per ``merge_request_urls`` token.  A merge request that no longer
exists (404) simply yields no card; any other backend failure aborts the
whole request.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

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
from connectors.gitlab_pr import client
from connectors.gitlab_pr.messages import MESSAGES
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

MERGE_REQUEST_URL_REGEX = r"https?://[^\s/]+/[^\s/]+/[^\s/]+/(?:-/)?merge_requests/\d+"

_MR_URL = re.compile(
    r"^https?://[^/\s]+/(?P<namespace>[^/\s]+)/(?P<project>[^/\s]+)/(?:-/)?merge_requests/(?P<iid>[^/?#\s]+)"
)

_KNOWN_STATES = {"opened", "merged", "closed", "locked"}


def parse_merge_request_url(url: str) -> Optional[Tuple[str, str, str]]:
    """``https://host/ns/project/merge_requests/7`` → ``("ns", "project", "7")``."""
    match = _MR_URL.match(url.strip())
    if not match:
        return None
    return match.group("namespace"), match.group("project"), match.group("iid")


class GitlabPrConnector(BaseConnector):
    """Merge-request cards with approve / comment / merge / close actions."""

    def __init__(self) -> None:
        self._messages = MessageCatalog(MESSAGES)

    @property
    def provider_name(self) -> str:
        return "gitlab-pr"

    @property
    def display_name(self) -> str:
        return "GitLab"

    @property
    def messages(self) -> MessageCatalog:
        return self._messages

    @property
    def token_fields(self) -> List[TokenField]:
        return [TokenField("merge_request_urls", regex=MERGE_REQUEST_URL_REGEX)]

    @property
    def action_paths(self) -> List[str]:
        return [
            f"api/v1/{{namespace}}/{{project}}/{{iid}}/{name}"
            for name in ("approve", "comment", "merge", "close")
        ]

    # ── Cards ────────────────────────────────────────────────────────────

    async def build_cards(self, request: CardRequest, ctx: CardContext) -> List[Card]:
        targets = []
        for url in request.token("merge_request_urls"):
            parsed = parse_merge_request_url(url)
            if parsed is None:
                logger.info("Ignoring malformed merge request URL: %s", url)
                continue
            targets.append((url, parsed))

        async def _card_for(target: Tuple[str, Tuple[str, str, str]]) -> Optional[Card]:
            url, (namespace, project, iid) = target
            mr = await client.get_merge_request(ctx.backend, namespace, project, iid)
            if mr is None:
                return None
            return self._make_card(ctx, url, namespace, project, mr)

        return await self.fan_out(targets, _card_for)

    def _make_card(
        self,
        ctx: CardContext,
        url: str,
        namespace: str,
        project: str,
        mr: Dict[str, Any],
    ) -> Card:
        t = ctx.translate
        iid = str(mr.get("iid", ""))
        state = mr.get("state", "")
        author = (mr.get("author") or {}).get("name") or (mr.get("author") or {}).get("username", "")

        fields = [
            CardBodyField(title=t("card.field.repository.title"), description=f"{namespace}/{project}"),
            CardBodyField(title=t("card.field.requester.title"), description=author),
            CardBodyField(
                title=t("card.field.state.title"),
                description=t(f"card.field.state.{state}") if state in _KNOWN_STATES else state,
            ),
        ]
        if mr.get("merge_status"):
            fields.append(CardBodyField(title=t("card.field.mergeable.title"), description=mr["merge_status"]))
        if mr.get("created_at"):
            fields.append(CardBodyField(title=t("card.field.created.title"), description=mr["created_at"]))
        if mr.get("changes_count"):
            fields.append(
                CardBodyField(
                    title=t("card.field.changes.title"),
                    description=t("card.field.changes.value", count=mr["changes_count"]),
                )
            )
        if mr.get("description"):
            fields.append(CardBodyField(title=t("card.field.description.title"), description=mr["description"]))

        base = f"api/v1/{namespace}/{project}/{iid}"
        actions = []
        if state == "opened":
            sha = mr.get("sha") or ""
            actions.extend([
                CardAction(
                    label=t("card.action.approve.label"),
                    completed_label=t("card.action.approve.completed"),
                    url=ctx.href(f"{base}/approve"),
                    request={"sha": sha},
                    primary=True,
                ),
                CardAction(
                    label=t("card.action.merge.label"),
                    completed_label=t("card.action.merge.completed"),
                    url=ctx.href(f"{base}/merge"),
                    request={"sha": sha},
                    mutually_exclusive_set_id="resolve",
                    remove_card_on_completion=True,
                ),
                CardAction(
                    label=t("card.action.close.label"),
                    completed_label=t("card.action.close.completed"),
                    url=ctx.href(f"{base}/close"),
                    mutually_exclusive_set_id="resolve",
                    remove_card_on_completion=True,
                ),
            ])
        actions.append(
            CardAction(
                label=t("card.action.comment.label"),
                completed_label=t("card.action.comment.completed"),
                url=ctx.href(f"{base}/comment"),
                action_key=ActionKey.USER_INPUT,
                user_input=[
                    CardActionInputField(id="message", label=t("card.action.comment.input.label"), min_length=1)
                ],
            )
        )

        return self.new_card(
            ctx,
            header=CardHeader(
                title=t("card.header.title", title=mr.get("title", "")),
                subtitle=[t("card.header.subtitle", namespace=namespace, project=project, iid=iid)],
            ),
            body=CardBody(
                description=t(
                    "card.body.description",
                    author=author,
                    source=mr.get("source_branch", ""),
                    target=mr.get("target_branch", ""),
                ),
                fields=fields,
            ),
            actions=actions,
            backend_id=url,
        )

    # ── Actions ──────────────────────────────────────────────────────────

    def router(self) -> APIRouter:
        router = APIRouter(prefix="/api/v1", dependencies=[require_hub_auth])
        backend_dep = self.backend_dependency()

        @router.post("/{namespace}/{project}/{iid}/approve")
        async def approve(
            namespace: str,
            project: str,
            iid: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            sha = required_field(await read_form(request), "sha")
            return await client.approve(backend, namespace, project, iid, sha)

        @router.post("/{namespace}/{project}/{iid}/comment")
        async def comment(
            namespace: str,
            project: str,
            iid: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            message = required_field(await read_form(request), "message")
            return await client.comment(backend, namespace, project, iid, message)

        @router.post("/{namespace}/{project}/{iid}/merge")
        async def merge(
            namespace: str,
            project: str,
            iid: str,
            request: Request,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            sha = required_field(await read_form(request), "sha")
            return await client.merge(backend, namespace, project, iid, sha)

        @router.post("/{namespace}/{project}/{iid}/close")
        async def close(
            namespace: str,
            project: str,
            iid: str,
            backend: BackendClient = Depends(backend_dep),
        ) -> Any:
            return await client.close(backend, namespace, project, iid)

        return router
