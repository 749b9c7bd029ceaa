"""
Coupa REST calls.  Coupa JSON uses hyphenated keys (``approvable-id``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from backends.base import BackendClient

logger = logging.getLogger(__name__)

PENDING_STATUS = "pending_approval"
REQUISITION_TYPE = "RequisitionHeader"


async def find_user_id(backend: BackendClient, email: str) -> Optional[str]:
    users = await backend.get_json("/api/users", params={"email": email}) or []
    if not users:
        logger.info("No Coupa user for %s", email)
        return None
    return str(users[0].get("id"))


async def list_pending_approvals(backend: BackendClient, user_id: str) -> List[Dict[str, Any]]:
    return await backend.get_json(
        "/api/approvals",
        params={"approver_id": user_id, "status": PENDING_STATUS},
    ) or []


async def get_requisition(backend: BackendClient, requisition_id: str) -> Dict[str, Any]:
    return await backend.get_json(f"/api/requisitions/{requisition_id}") or {}


async def decide(backend: BackendClient, approval_id: str, decision: str, reason: str = "") -> Any:
    """PUT ``/api/approvals/{id}/approve`` or ``/reject``."""
    result = await backend.send_json(
        "PUT",
        f"/api/approvals/{approval_id}/{decision}",
        params={"reason": reason},
    )
    logger.info("Coupa approval %s: %s", approval_id, decision)
    return result
