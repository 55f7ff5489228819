"""
Tests for the WhatsApp webhook and send endpoints.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from civic.messaging.history import InMemorySessionStore
from civic.messaging.processor import CommandProcessor
from civic.messaging.whatsapp import router
from civic.messaging.whatsapp.client import WhatsAppNotConfiguredError, WhatsAppSendError
from civic.messaging.whatsapp.config import WhatsAppConfig, get_whatsapp_config

from conftest import FakeAssistant, FakePetitionStore


class FakeWhatsAppClient:
    def __init__(self, error: WhatsAppSendError | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, str]] = []
        self.templates: list[tuple[str, str, list[str]]] = []

    async def send_text(self, to: str, body: str) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append((to, body))
        return "wamid.OUT"

    async def send_template(self, to: str, name: str, params=None, language: str = "en") -> str:
        if self.error is not None:
            raise self.error
        self.templates.append((to, name, list(params or [])))
        return "wamid.TPL"


class ExplodingProcessor:
    async def handle(self, sender_id: str, text: str) -> str:
        raise RuntimeError("processor exploded")


def _inbound(*messages: dict) -> dict:
    return {"entry": [{"changes": [{"value": {"messages": list(messages)}}]}]}


def _text(body: str, sender: str = "263771234567", message_id: str = "wamid.IN") -> dict:
    return {"from": sender, "id": message_id, "type": "text", "text": {"body": body}}


@pytest.fixture
def wa_client() -> FakeWhatsAppClient:
    return FakeWhatsAppClient()


@pytest.fixture
def processor(petition_store: FakePetitionStore, assistant: FakeAssistant) -> CommandProcessor:
    return CommandProcessor(
        petitions=petition_store,
        assistant=assistant,
        sessions=InMemorySessionStore(),
        website_url="dcpzim.com",
    )


@pytest.fixture
def app(wa_client: FakeWhatsAppClient, processor: CommandProcessor) -> FastAPI:
    app = FastAPI()
    app.include_router(router.router)
    app.dependency_overrides[router.get_whatsapp_client] = lambda: wa_client
    app.dependency_overrides[router.get_command_processor] = lambda: processor
    app.dependency_overrides[get_whatsapp_config] = lambda: WhatsAppConfig(
        verify_token="verify-me", token="t", phone_number_id="1"
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestVerifyWebhook:
    def test_echoes_challenge(self, client: TestClient) -> None:
        resp = client.get(
            "/api/whatsapp/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "12345"},
        )

        assert resp.status_code == 200
        assert resp.text == "12345"

    def test_wrong_token_forbidden(self, client: TestClient) -> None:
        resp = client.get(
            "/api/whatsapp/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "12345"},
        )

        assert resp.status_code == 403
        assert "12345" not in resp.text

    def test_wrong_mode_forbidden(self, client: TestClient) -> None:
        resp = client.get(
            "/api/whatsapp/webhook",
            params={"hub.mode": "unsubscribe", "hub.verify_token": "verify-me", "hub.challenge": "1"},
        )

        assert resp.status_code == 403

    def test_unset_verify_token_forbidden(self, app: FastAPI, client: TestClient) -> None:
        app.dependency_overrides[get_whatsapp_config] = lambda: WhatsAppConfig(verify_token="")

        resp = client.get(
            "/api/whatsapp/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "", "hub.challenge": "1"},
        )

        assert resp.status_code == 403


class TestReceiveWebhook:
    def test_text_message_replied(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        resp = client.post("/api/whatsapp/webhook", json=_inbound(_text("PETITIONS")))

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        ((to, body),) = wa_client.sent
        assert to == "263771234567"
        assert body.startswith("Active petitions:")

    def test_media_message_gets_text_only_reply(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        message = {"from": "263771234567", "id": "wamid.M", "type": "audio", "audio": {"id": "a"}}

        resp = client.post("/api/whatsapp/webhook", json=_inbound(message))

        assert resp.status_code == 200
        assert wa_client.sent == [("263771234567", router.MEDIA_REPLY)]

    def test_other_types_ignored(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        message = {"from": "263771234567", "id": "wamid.L", "type": "location", "location": {}}

        resp = client.post("/api/whatsapp/webhook", json=_inbound(message))

        assert resp.status_code == 200
        assert wa_client.sent == []

    def test_status_callback_acknowledged(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        resp = client.post(
            "/api/whatsapp/webhook",
            json={"entry": [{"changes": [{"value": {"statuses": [{"status": "read"}]}}]}]},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert wa_client.sent == []

    def test_invalid_json_acknowledged(self, client: TestClient) -> None:
        resp = client.post(
            "/api/whatsapp/webhook",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    def test_processor_failure_acknowledged(self, app: FastAPI, client: TestClient) -> None:
        app.dependency_overrides[router.get_command_processor] = lambda: ExplodingProcessor()

        resp = client.post("/api/whatsapp/webhook", json=_inbound(_text("hello")))

        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    def test_send_failure_acknowledged(self, app: FastAPI, client: TestClient) -> None:
        failing = FakeWhatsAppClient(error=WhatsAppSendError("Invalid parameter", status_code=400))
        app.dependency_overrides[router.get_whatsapp_client] = lambda: failing

        resp = client.post("/api/whatsapp/webhook", json=_inbound(_text("hello")))

        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    def test_every_message_in_batch_handled(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        resp = client.post(
            "/api/whatsapp/webhook",
            json=_inbound(_text("hi", sender="a", message_id="m1"), _text("yo", sender="b", message_id="m2")),
        )

        assert resp.status_code == 200
        assert [to for to, _ in wa_client.sent] == ["a", "b"]


class TestSendMessage:
    def test_text(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        resp = client.post("/api/whatsapp/send", json={"to": "263771234567", "message": "Hello"})

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message_id": "wamid.OUT"}
        assert wa_client.sent == [("263771234567", "Hello")]

    def test_template(self, client: TestClient, wa_client: FakeWhatsAppClient) -> None:
        resp = client.post(
            "/api/whatsapp/send",
            json={
                "to": "263771234567",
                "type": "template",
                "templateName": "petition_update",
                "templateParams": ["Roads"],
            },
        )

        assert resp.status_code == 200
        assert wa_client.templates == [("263771234567", "petition_update", ["Roads"])]

    @pytest.mark.parametrize(
        "body,detail",
        [
            ({"message": "Hello"}, "Phone number (to) is required"),
            ({"to": "1"}, "Message is required for text type"),
            ({"to": "1", "type": "template"}, "Template name is required for template type"),
        ],
    )
    def test_validation_errors(self, client: TestClient, body: dict, detail: str) -> None:
        resp = client.post("/api/whatsapp/send", json=body)

        assert resp.status_code == 400
        assert resp.json()["detail"] == detail

    def test_missing_credentials_is_500(self, app: FastAPI, client: TestClient) -> None:
        app.dependency_overrides[router.get_whatsapp_client] = lambda: FakeWhatsAppClient(
            error=WhatsAppNotConfiguredError()
        )

        resp = client.post("/api/whatsapp/send", json={"to": "1", "message": "hi"})

        assert resp.status_code == 500
        assert resp.json()["detail"] == "WhatsApp credentials not configured"

    def test_provider_status_propagated(self, app: FastAPI, client: TestClient) -> None:
        app.dependency_overrides[router.get_whatsapp_client] = lambda: FakeWhatsAppClient(
            error=WhatsAppSendError("Invalid parameter", status_code=400)
        )

        resp = client.post("/api/whatsapp/send", json={"to": "1", "message": "hi"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid parameter"
