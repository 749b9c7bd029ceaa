"""
ServiceNow Table API calls.

Card lookup is a four-hop chain:
  user (sys_user by email) → pending approvals (sysapproval_approver)
  → request (sc_request) → requested items (sc_req_item)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from backends.base import BackendClient
from config.settings import config

logger = logging.getLogger(__name__)

_TABLE = "/api/now/table"

APPROVAL_FIELDS = "sys_id,sysapproval,comments,due_date,sys_created_by"
REQUEST_FIELDS = "sys_id,price,number"
ITEM_FIELDS = "sys_id,price,request,short_description,quantity"
ACTION_FIELDS = "sys_id,state,comments"
TASK_FIELDS = "number,sys_created_on,sys_created_by,short_description"


def reference_id(value: Any) -> Optional[str]:
    """Reference fields arrive as ``{"link": ..., "value": sys_id}`` or a bare id."""
    if isinstance(value, dict):
        return value.get("value")
    return value or None


def _result(payload: Any) -> Any:
    if isinstance(payload, dict):
        return payload.get("result")
    return None


async def find_user_id(backend: BackendClient, email: str) -> Optional[str]:
    """sys_id of the user with *email*, or None."""
    payload = await backend.get_json(
        f"{_TABLE}/sys_user",
        params={"sysparm_fields": "sys_id", "sysparm_limit": 1, "email": email},
    )
    users = _result(payload) or []
    if not users:
        logger.info("No ServiceNow user for %s", email)
        return None
    return users[0].get("sys_id")


async def list_pending_approvals(backend: BackendClient, user_id: str) -> List[Dict[str, Any]]:
    """Catalog-request approvals still waiting on *user_id*."""
    payload = await backend.get_json(
        f"{_TABLE}/sysapproval_approver",
        params={
            "sysparm_fields": APPROVAL_FIELDS,
            "sysparm_limit": config.servicenow_query_limit,
            "source_table": "sc_request",
            "state": "requested",
            "approver": user_id,
        },
    )
    return _result(payload) or []


async def get_request(backend: BackendClient, request_id: str) -> Dict[str, Any]:
    payload = await backend.get_json(
        f"{_TABLE}/sc_request/{request_id}",
        params={"sysparm_fields": REQUEST_FIELDS},
    )
    return _result(payload) or {}


async def list_request_items(backend: BackendClient, request_id: str) -> List[Dict[str, Any]]:
    payload = await backend.get_json(
        f"{_TABLE}/sc_req_item",
        params={
            "sysparm_fields": ITEM_FIELDS,
            "sysparm_limit": config.servicenow_query_limit,
            "request": request_id,
        },
    )
    return _result(payload) or []


async def update_approval(
    backend: BackendClient,
    approval_id: str,
    state: str,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """PATCH the approval's state ("approved" / "rejected")."""
    body: Dict[str, str] = {"state": state}
    if comments is not None:
        body["comments"] = comments
    payload = await backend.send_json(
        "PATCH",
        f"{_TABLE}/sysapproval_approver/{approval_id}",
        body,
        params={"sysparm_fields": ACTION_FIELDS},
    )
    logger.info("ServiceNow approval %s → %s", approval_id, state)
    return _result(payload) or {}


class TaskDetails(BaseModel):
    number: Optional[str] = None
    sys_created_on: Optional[str] = None
    sys_created_by: Optional[str] = None
    short_description: Optional[str] = None

    @classmethod
    def from_result(cls, result: Any) -> Optional["TaskDetails"]:
        """Accept a single record or a result array (first record wins)."""
        if isinstance(result, list):
            if not result:
                return None
            result = result[0]
        if not isinstance(result, dict):
            return None
        return cls(**{k: result.get(k) for k in cls.model_fields})


async def get_task(backend: BackendClient, number: str) -> Optional[TaskDetails]:
    payload = await backend.get_json(
        f"{_TABLE}/task",
        params={"sysparm_fields": TASK_FIELDS, "sysparm_limit": 1, "number": number},
    )
    return TaskDetails.from_result(_result(payload))
