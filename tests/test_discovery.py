"""
Tests for discovery metadata, static images and the shared error handling.
"""

import pytest


class TestDiscovery:
    def test_metadata_uses_routing_prefix(self, make_client):
        client = make_client("servicenow")
        resp = client.get("/", headers={"X-Routing-Prefix": "https://hero/connectors/snow"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "servicenow"
        assert body["image"]["href"] == "https://hero/connectors/snow/images/connector.png"
        card = body["object_types"]["card"]
        assert card["endpoint"]["href"] == "https://hero/connectors/snow/cards/requests"
        assert card["fields"]["ticket_id"] == {"regex": r"\b(REQ\d{7})\b", "capture_group": 1}
        assert card["fields"]["email"] == {"env": "USER_EMAIL"}
        assert set(card["locales"]) == {"en", "xx"}
        assert "https://hero/connectors/snow/api/v1/tickets/{ticket_id}/approve" in body["actions"]

    def test_metadata_falls_back_to_base_url(self, make_client):
        body = make_client("gitlab-pr").get("/discovery/metadata.json").json()
        assert body["name"] == "gitlab-pr"
        assert body["object_types"]["card"]["endpoint"]["href"] == "http://testserver/cards/requests"

    @pytest.mark.parametrize("name", ["servicenow", "gitlab-pr", "salesforce", "airwatch", "coupa"])
    def test_every_connector_publishes_metadata(self, make_client, name):
        body = make_client(name).get("/").json()
        assert body["name"] == name
        assert body["object_types"]["card"]["fields"]

    def test_image(self, make_client):
        resp = make_client("coupa").get("/images/connector.png")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content.startswith(b"\x89PNG")


class TestCardRequestErrors:
    def test_missing_authorization_header(self, make_client, connector_headers, backend):
        headers = {k: v for k, v in connector_headers.items() if k != "X-Connector-Authorization"}
        resp = make_client("servicenow").post(
            "/cards/requests",
            json={"tokens": {"ticket_id": ["REQ0010001"], "email": ["a@b.com"]}},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"message": "Missing request header 'X-Connector-Authorization'"}
        assert backend.calls == []

    def test_missing_routing_prefix(self, make_client, connector_headers):
        headers = {k: v for k, v in connector_headers.items() if k != "X-Routing-Prefix"}
        resp = make_client("gitlab-pr").post("/cards/requests", json={"tokens": {}}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Missing request header 'X-Routing-Prefix'"

    def test_missing_base_url(self, make_client, connector_headers):
        headers = {k: v for k, v in connector_headers.items() if k != "X-Connector-Base-Url"}
        resp = make_client("gitlab-pr").post("/cards/requests", json={"tokens": {}}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Missing request header 'X-Connector-Base-Url'"

    def test_malformed_body(self, make_client, connector_headers):
        resp = make_client("servicenow").post("/cards/requests", json={"tokens": "nope"}, headers=connector_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Malformed request"

    def test_process_time_header(self, make_client, connector_headers):
        resp = make_client("servicenow").post("/cards/requests", json={}, headers=connector_headers)
        assert resp.status_code == 200
        assert resp.json() == {"cards": []}
        assert "X-Process-Time" in resp.headers
