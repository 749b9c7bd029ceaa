"""
AirWatch connector: app install cards and the app catalog install action.
"""

import pytest

from config.settings import config

STATUS_PATH = "/deviceservices/AppInstallationStatus"
GREENBOX_URL = "https://greenbox.test"
PORTAL = "/catalog-portal/services"
INSTALL_PATH = f"{PORTAL}/api/activate/MDM-134-Native-Public"


def _status(backend, bundle_id, installed, udid="ABCD", status=200):
    body = {"IsApplicationInstalled": installed} if status == 200 else {"errorCode": status}
    backend.expect("GET", STATUS_PATH, params={"Udid": udid, "BundleId": bundle_id}, status=status, body=body)


def _card_request(keywords, udid="ABCD", platform="android"):
    return {"tokens": {"app_keywords": keywords, "udid": [udid], "platform": [platform]}}


def _cookies(request):
    """Cookie header of a recorded request as a dict."""
    pairs = (part.split("=", 1) for part in request.headers.get("Cookie", "").split("; ") if part)
    return {name: value for name, value in pairs}


def _entitlement(name):
    return {
        "name": name,
        "_links": {"install": {"href": GREENBOX_URL + INSTALL_PATH}},
    }


@pytest.fixture
def client(make_client):
    return make_client("airwatch")


class TestAirWatchCards:
    def test_android_cards_for_missing_apps(self, client, backend, connector_headers):
        _status(backend, "com.android.boxer", installed=True)
        _status(backend, "com.concur.breeze", installed=False)

        resp = client.post(
            "/cards/requests",
            json=_card_request(["Boxer", "concur", "BOXER"]),
            headers=connector_headers,
        )

        assert resp.status_code == 200
        cards = resp.json()["cards"]
        assert len(cards) == 1
        card = cards[0]
        assert card["header"]["title"] == "[AirWatch] Concur"
        install = card["actions"][0]
        assert install["url"]["href"] == "https://hero/connectors/test/mdm/app/install"
        assert install["request"] == {"app_name": "Concur", "udid": "ABCD", "platform": "android"}
        assert len(backend.calls) == 2

    def test_ios_bundle_ids(self, client, backend, connector_headers):
        _status(backend, "com.air-watch.boxer", installed=False)
        _status(backend, "com.concur.concurmobile", installed=False)

        resp = client.post(
            "/cards/requests",
            json=_card_request(["boxer", "concur", "poison"], platform="iOS"),
            headers=connector_headers,
        )

        cards = resp.json()["cards"]
        assert sorted(c["backend_id"] for c in cards) == ["com.air-watch.boxer", "com.concur.concurmobile"]
        # poison has no iOS bundle and is never queried
        assert all(c.url.params["BundleId"] != "com.poison.pill" for c in backend.calls)

    def test_invalid_platform(self, client, backend, connector_headers):
        resp = client.post("/cards/requests", json=_card_request(["boxer"], platform="symbian"),
                           headers=connector_headers)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid platform 'symbian'"}
        assert backend.calls == []

    def test_unknown_udid(self, client, backend, connector_headers):
        _status(backend, "com.android.boxer", installed=False, udid="INVALID", status=404)
        resp = client.post("/cards/requests", json=_card_request(["boxer"], udid="INVALID"),
                           headers=connector_headers)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Unknown device UDID 'INVALID'"}

    def test_forbidden_udid(self, client, backend, connector_headers):
        _status(backend, "com.android.boxer", installed=False, status=403)
        resp = client.post("/cards/requests", json=_card_request(["boxer"]), headers=connector_headers)
        assert resp.status_code == 400
        assert "not accessible" in resp.json()["message"]

    def test_server_error(self, client, backend, connector_headers):
        _status(backend, "com.poison.pill", installed=False, status=500)
        resp = client.post("/cards/requests", json=_card_request(["poison"]), headers=connector_headers)
        assert resp.status_code == 500
        assert resp.headers["X-Backend-Status"] == "500"

    @pytest.mark.parametrize(
        "tokens",
        [
            {"app_keywords": [], "udid": ["ABCD"], "platform": ["android"]},
            {"app_keywords": ["boxer"], "platform": ["android"]},
            {"app_keywords": ["boxer"], "udid": ["ABCD"]},
        ],
    )
    def test_missing_tokens(self, client, backend, connector_headers, tokens):
        resp = client.post("/cards/requests", json={"tokens": tokens}, headers=connector_headers)
        assert resp.json() == {"cards": []}
        assert backend.calls == []

    def test_unknown_keyword(self, client, backend, connector_headers):
        resp = client.post("/cards/requests", json=_card_request(["solitaire"]), headers=connector_headers)
        assert resp.json() == {"cards": []}
        assert backend.calls == []


class TestInstallAction:
    @pytest.fixture(autouse=True)
    def _greenbox(self, monkeypatch):
        monkeypatch.setattr(config, "greenbox_url", GREENBOX_URL)

    def _expect_session(self, backend, device_type="android"):
        backend.expect("POST", f"{PORTAL}/auth/eucTokens",
                       params={"deviceUdid": "ABCD", "deviceType": device_type},
                       status=201, body={"eucToken": "euc123"})
        backend.expect("GET", PORTAL, body="",
                       headers={"Set-Cookie": "EUC_XSRF_TOKEN=csrf123;Path=/catalog-portal;Secure"})

    def test_install(self, client, backend, connector_headers):
        self._expect_session(backend)
        backend.expect("GET", f"{PORTAL}/api/entitlements", params={"q": "Concur"},
                       body={"_embedded": {"entitlements": [_entitlement("Concur")]}})
        backend.expect("POST", INSTALL_PATH, body={"status": "PROCESSING"})

        resp = client.post(
            "/mdm/app/install",
            data={"app_name": "Concur", "udid": "ABCD", "platform": "android"},
            headers={**connector_headers, "X-Connector-Authorization": "Bearer vidm"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"status": "PROCESSING"}

        euc, context, search, install = backend.calls
        assert _cookies(euc) == {"HZN": "vidm"}
        assert "Authorization" not in euc.headers
        assert _cookies(context) == {"USER_CATALOG_CONTEXT": "euc123"}
        assert _cookies(search)["USER_CATALOG_CONTEXT"] == "euc123"
        assert _cookies(install) == {"USER_CATALOG_CONTEXT": "euc123", "EUC_XSRF_TOKEN": "csrf123"}
        assert install.headers["X-XSRF-TOKEN"] == "csrf123"

    def test_ios_device_type(self, client, backend, connector_headers):
        self._expect_session(backend, device_type="Apple")
        backend.expect("GET", f"{PORTAL}/api/entitlements", body={"_embedded": {"entitlements": [_entitlement("Boxer")]}})
        backend.expect("POST", INSTALL_PATH, body={})

        resp = client.post(
            "/mdm/app/install",
            data={"app_name": "Boxer", "udid": "ABCD", "platform": "ios"},
            headers=connector_headers,
        )
        assert resp.status_code == 200

    @pytest.mark.parametrize(
        "entitlements",
        [[], [_entitlement("Browser"), _entitlement("Browser Beta")]],
    )
    def test_ambiguous_or_missing_app(self, client, backend, connector_headers, entitlements):
        self._expect_session(backend)
        backend.expect("GET", f"{PORTAL}/api/entitlements", body={"_embedded": {"entitlements": entitlements}})

        resp = client.post(
            "/mdm/app/install",
            data={"app_name": "Browser", "udid": "ABCD", "platform": "android"},
            headers=connector_headers,
        )
        assert resp.status_code == 400
        assert not backend.calls_to("POST", INSTALL_PATH)

    @pytest.mark.parametrize("missing", ["app_name", "udid", "platform"])
    def test_required_fields(self, client, backend, connector_headers, missing):
        form = {"app_name": "Concur", "udid": "ABCD", "platform": "android"}
        form.pop(missing)
        resp = client.post("/mdm/app/install", data=form, headers=connector_headers)
        assert resp.status_code == 400
        assert backend.calls == []

    def test_invalid_platform(self, client, backend, connector_headers):
        resp = client.post(
            "/mdm/app/install",
            data={"app_name": "Concur", "udid": "ABCD", "platform": "blackberry"},
            headers=connector_headers,
        )
        assert resp.status_code == 400
        assert backend.calls == []

    def test_missing_authorization(self, client, backend, connector_headers):
        headers = {k: v for k, v in connector_headers.items() if k != "X-Connector-Authorization"}
        resp = client.post(
            "/mdm/app/install",
            data={"app_name": "Concur", "udid": "ABCD", "platform": "android"},
            headers=headers,
        )
        assert resp.status_code == 400
        assert backend.calls == []
