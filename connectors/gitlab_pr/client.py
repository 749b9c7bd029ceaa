"""
GitLab v4 merge-request API calls.

Projects are addressed by their URL-encoded full path
(``vmware/test-repo`` → ``vmware%2Ftest-repo``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from api.errors import BackendError
from backends.base import BackendClient

logger = logging.getLogger(__name__)


def _mr_path(namespace: str, project: str, iid: str) -> str:
    project_id = quote(f"{namespace}/{project}", safe="")
    return f"/api/v4/projects/{project_id}/merge_requests/{quote(str(iid), safe='')}"


async def get_merge_request(
    backend: BackendClient,
    namespace: str,
    project: str,
    iid: str,
) -> Optional[Dict[str, Any]]:
    """The merge request, or None when GitLab answers 404."""
    try:
        return await backend.get_json(_mr_path(namespace, project, iid))
    except BackendError as exc:
        if exc.backend_status == 404:
            logger.info("Merge request %s/%s!%s not found", namespace, project, iid)
            return None
        raise


async def approve(backend: BackendClient, namespace: str, project: str, iid: str, sha: str) -> Any:
    return await backend.send_json("POST", _mr_path(namespace, project, iid) + "/approve", {"sha": sha})


async def comment(backend: BackendClient, namespace: str, project: str, iid: str, body: str) -> Any:
    return await backend.send_json("POST", _mr_path(namespace, project, iid) + "/notes", {"body": body})


async def merge(backend: BackendClient, namespace: str, project: str, iid: str, sha: str) -> Any:
    return await backend.send_json("PUT", _mr_path(namespace, project, iid) + "/merge", {"sha": sha})


async def close(backend: BackendClient, namespace: str, project: str, iid: str) -> Any:
    return await backend.send_json("PUT", _mr_path(namespace, project, iid), {"state_event": "close"})
