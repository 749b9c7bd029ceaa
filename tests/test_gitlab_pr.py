"""
GitLab merge-request connector.
"""

import time

import pytest

MR_URL = "https://gitlab.com/vmware/test-repo/merge_requests/1"
MR_PATH = "/api/v4/projects/vmware%2Ftest-repo/merge_requests/1"


def _merge_request(state="opened", **extra):
    mr = {
        "iid": 1,
        "title": "Fix the flux capacitor",
        "description": "It was leaking.",
        "state": state,
        "merge_status": "can_be_merged",
        "created_at": "2026-10-01T12:00:00Z",
        "author": {"name": "Jane Doe", "username": "jdoe"},
        "source_branch": "fix-flux",
        "target_branch": "main",
        "sha": "abc123",
        "changes_count": "3",
    }
    mr.update(extra)
    return mr


@pytest.fixture
def client(make_client):
    return make_client("gitlab-pr")


class TestGitlabCards:
    def test_open_merge_request(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, body=_merge_request())

        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL]}},
            headers=connector_headers,
        )

        assert resp.status_code == 200
        cards = resp.json()["cards"]
        assert len(cards) == 1
        card = cards[0]
        assert card["backend_id"] == MR_URL
        assert card["header"]["title"] == "[GitLab] Fix the flux capacitor"
        assert card["header"]["subtitle"] == ["vmware/test-repo !1"]
        labels = [a["label"] for a in card["actions"]]
        assert labels == ["Approve", "Merge", "Close", "Comment"]
        approve = card["actions"][0]
        assert approve["request"] == {"sha": "abc123"}
        assert approve["url"]["href"] == "https://hero/connectors/test/api/v1/vmware/test-repo/1/approve"

    def test_merged_request_only_offers_comment(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, body=_merge_request(state="merged", sha=None))
        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL]}},
            headers=connector_headers,
        )
        card = resp.json()["cards"][0]
        assert [a["label"] for a in card["actions"]] == ["Comment"]

    def test_missing_merge_request_is_skipped(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, body=_merge_request())
        backend.expect("GET", "/api/v4/projects/vmware%2Ftest-repo/merge_requests/2",
                       status=404, body={"message": "404 Not found"})
        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [
                MR_URL,
                "https://gitlab.com/vmware/test-repo/-/merge_requests/2",
            ]}},
            headers=connector_headers,
        )
        assert resp.status_code == 200
        assert [c["backend_id"] for c in resp.json()["cards"]] == [MR_URL]

    def test_duplicate_urls_fetch_once(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, body=_merge_request())
        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL, MR_URL]}},
            headers=connector_headers,
        )
        assert len(resp.json()["cards"]) == 1
        assert len(backend.calls_to("GET", MR_PATH)) == 1

    def test_empty_tokens(self, client, backend, connector_headers):
        resp = client.post("/cards/requests", json={"tokens": {"merge_request_urls": []}}, headers=connector_headers)
        assert resp.json() == {"cards": []}
        assert backend.calls == []

    def test_unauthorized(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, status=401, body={"message": "401 Unauthorized"})
        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL]}},
            headers=connector_headers,
        )
        assert resp.status_code == 400
        assert resp.headers["X-Backend-Status"] == "401"

    def test_server_error(self, client, backend, connector_headers):
        backend.expect("GET", MR_PATH, status=500, body={"message": "boom"})
        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL]}},
            headers=connector_headers,
        )
        assert resp.status_code == 500
        assert resp.headers["X-Backend-Status"] == "500"

    def test_failure_cancels_slower_lookups(self, client, backend, connector_headers):
        slow_url = MR_URL[:-1] + "2"
        slow_path = MR_PATH[:-1] + "2"
        backend.expect("GET", MR_PATH, status=500, body={"message": "boom"})
        backend.expect("GET", slow_path, body=_merge_request(iid=2), delay=0.3)

        resp = client.post(
            "/cards/requests",
            json={"tokens": {"merge_request_urls": [MR_URL, slow_url]}},
            headers=connector_headers,
        )

        assert resp.status_code == 500
        time.sleep(0.4)
        completed = [c.url.raw_path.decode("ascii").split("?", 1)[0] for c in backend.completed]
        assert completed == [MR_PATH]


class TestGitlabActions:
    def test_approve(self, client, backend, connector_headers):
        backend.expect("POST", MR_PATH + "/approve", status=201, body={"id": 1})
        resp = client.post("/api/v1/vmware/test-repo/1/approve", data={"sha": "abc123"}, headers=connector_headers)
        assert resp.status_code == 200
        assert backend.json_body(backend.calls[0]) == {"sha": "abc123"}

    def test_comment(self, client, backend, connector_headers):
        backend.expect("POST", MR_PATH + "/notes", status=201, body={"id": 99, "body": "LGTM"})
        resp = client.post("/api/v1/vmware/test-repo/1/comment", data={"message": "LGTM"}, headers=connector_headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == 99
        assert backend.json_body(backend.calls[0]) == {"body": "LGTM"}

    def test_merge(self, client, backend, connector_headers):
        backend.expect("PUT", MR_PATH + "/merge", body={"state": "merged"})
        resp = client.post("/api/v1/vmware/test-repo/1/merge", data={"sha": "abc123"}, headers=connector_headers)
        assert resp.status_code == 200
        assert resp.json() == {"state": "merged"}

    def test_close(self, client, backend, connector_headers):
        backend.expect("PUT", MR_PATH, body={"state": "closed"})
        resp = client.post("/api/v1/vmware/test-repo/1/close", headers=connector_headers)
        assert resp.status_code == 200
        assert backend.json_body(backend.calls[0]) == {"state_event": "close"}

    @pytest.mark.parametrize(
        "action, form",
        [("approve", {}), ("comment", {"message": ""}), ("merge", {"sha": " "})],
    )
    def test_required_fields(self, client, backend, connector_headers, action, form):
        resp = client.post(f"/api/v1/vmware/test-repo/1/{action}", data=form, headers=connector_headers)
        assert resp.status_code == 400
        assert backend.calls == []

    def test_backend_error_body_is_preserved(self, client, backend, connector_headers):
        backend.expect("PUT", MR_PATH + "/merge", status=405, body={"message": "Method Not Allowed"})
        resp = client.post("/api/v1/vmware/test-repo/1/merge", data={"sha": "abc123"}, headers=connector_headers)
        assert resp.status_code == 500
        assert resp.headers["X-Backend-Status"] == "405"
        assert resp.json() == {"message": "Method Not Allowed"}
