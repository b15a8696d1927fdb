from firebase_admin import exceptions, messaging

from push_gateway.errors import ConfigError

URL = "/api/send-notification"
VALID_TOKEN = "T" * 150


def test_send_notification(make_api_client, fake_provider_factory, fake_client_factory):
    client = fake_client_factory(["projects/p/messages/1"])
    api = make_api_client(fake_provider_factory(client))

    response = api.post(URL, json={"receiverToken": VALID_TOKEN, "senderName": "Alice", "messageText": "hi"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Notification sent",
        "messageId": "projects/p/messages/1",
        "tierUsed": "full",
    }
    assert response.headers["access-control-allow-origin"] == "*"
    assert client.sent[0].notification.title == "Alice"


def test_degraded_delivery_is_success(make_api_client, fake_provider_factory, fake_client_factory):
    client = fake_client_factory([
        exceptions.InvalidArgumentError("bad"),
        exceptions.InvalidArgumentError("bad"),
        "projects/p/messages/3",
    ])
    api = make_api_client(fake_provider_factory(client))

    response = api.post(URL, json={"receiverToken": VALID_TOKEN, "messageText": "hi"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["tierUsed"] == "minimal"
    assert body["degraded"] is True


def test_missing_token(make_api_client, fake_provider_factory, fake_client_factory):
    provider = fake_provider_factory(fake_client_factory())
    api = make_api_client(provider)

    response = api.post(URL, json={"messageText": "hi"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "MissingToken"
    assert body["code"] == "ValidationError"
    assert provider.calls == 0
    assert provider.client.sent == []


def test_missing_text(make_api_client, fake_provider_factory, fake_client_factory):
    api = make_api_client(fake_provider_factory(fake_client_factory()))

    response = api.post(URL, json={"receiverToken": VALID_TOKEN})

    assert response.status_code == 400
    assert response.json()["error"] == "MissingText"


def test_invalid_json(make_api_client, fake_provider_factory, fake_client_factory):
    api = make_api_client(fake_provider_factory(fake_client_factory()))

    response = api.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidBody"


def test_short_token_does_not_change_response(make_api_client, fake_provider_factory, fake_client_factory):
    api = make_api_client(fake_provider_factory(fake_client_factory(["projects/p/messages/9"])))

    response = api.post(URL, json={"receiverToken": "abc", "messageText": "hi"})

    assert response.status_code == 200
    assert set(response.json()) == {"success", "message", "messageId", "tierUsed"}


def test_all_tiers_fail(make_api_client, fake_provider_factory, fake_client_factory):
    client = fake_client_factory([
        exceptions.InvalidArgumentError("bad"),
        exceptions.UnknownError("internal"),
        messaging.UnregisteredError("Requested entity was not found."),
    ])
    api = make_api_client(fake_provider_factory(client))

    response = api.post(URL, json={"receiverToken": VALID_TOKEN, "messageText": "hi"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "DispatchError"
    assert body["errorType"] == "InvalidToken"
    assert body["error"] == "Requested entity was not found."
    assert "WrongCredential" in body["guidance"]


def test_firebase_not_configured(make_api_client, fake_provider_factory):
    api = make_api_client(fake_provider_factory(None, last_error="FIREBASE_SERVICE_ACCOUNT is not set"))

    response = api.post(URL, json={"receiverToken": VALID_TOKEN, "messageText": "hi"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "ConfigError"
    assert "FIREBASE_SERVICE_ACCOUNT is not set" in body["error"]


def test_status_endpoint(make_api_client, fake_provider_factory, fake_client_factory):
    response = make_api_client(fake_provider_factory(fake_client_factory())).get(URL)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["firebase"] == "ready"
    assert "timestamp" in body
    assert "receiverToken" in body["instruction"]

    response = make_api_client(fake_provider_factory(None)).get(URL)
    assert response.json()["firebase"] == "not-ready"


def test_preflight(make_api_client, fake_provider_factory):
    response = make_api_client(fake_provider_factory(None)).options(URL)

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS, GET"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_unsupported_method(make_api_client, fake_provider_factory):
    api = make_api_client(fake_provider_factory(None))

    for method in ("PUT", "PATCH", "DELETE", "TRACE"):
        response = api.request(method, URL)
        assert response.status_code == 405
        assert response.json()["success"] is False
        assert response.headers["access-control-allow-origin"] == "*"


def test_head_is_not_allowed(make_api_client, fake_provider_factory):
    response = make_api_client(fake_provider_factory(None)).head(URL)

    assert response.status_code == 405
    assert response.headers["access-control-allow-origin"] == "*"


def test_browser_preflight(make_api_client, fake_provider_factory):
    api = make_api_client(fake_provider_factory(None))

    for requested_headers in ("content-type", "content-type, authorization"):
        response = api.options(URL, headers={
            "Origin": "https://chat.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": requested_headers,
        })

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS, GET"


def test_unknown_path_keeps_not_found(make_api_client, fake_provider_factory):
    response = make_api_client(fake_provider_factory(None)).get("/api/nope")

    assert response.status_code == 404


def test_smoke_endpoint(make_api_client, fake_provider_factory):
    response = make_api_client(fake_provider_factory(None)).get("/api/test")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["endpoints"]["main"] == "POST /api/send-notification"


def test_config_error_is_not_a_crash(make_api_client):
    class BrokenProvider:
        last_error = None

        def get_client(self):
            raise ConfigError("FIREBASE_SERVICE_ACCOUNT has no project_id")

    response = make_api_client(BrokenProvider()).post(URL, json={"receiverToken": VALID_TOKEN, "messageText": "hi"})

    assert response.status_code == 500
    assert response.json()["code"] == "ConfigError"
