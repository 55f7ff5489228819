"""
Outbound WhatsApp Cloud API client.

Sync httpx calls with async wrappers run in a worker thread, so tests can
inject a mocked `httpx.Client`.
"""

from __future__ import annotations

from typing import Any, Sequence

import anyio
import httpx

from civic.messaging.whatsapp.config import WhatsAppConfig, get_whatsapp_config
from civic.shared.logging import get_logger

logger = get_logger(__name__)


class WhatsAppSendError(Exception):
    """Outbound message could not be delivered to the Cloud API.

    `status_code` is the HTTP status to surface to API callers.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider_response = provider_response or {}


class WhatsAppNotConfiguredError(WhatsAppSendError):
    def __init__(self) -> None:
        super().__init__("WhatsApp credentials not configured", status_code=500)


def build_text_payload(to: str, body: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"body": body},
    }


def build_template_payload(
    to: str,
    name: str,
    params: Sequence[str] | None = None,
    language: str = "en",
) -> dict[str, Any]:
    template: dict[str, Any] = {"name": name, "language": {"code": language}}
    if params:
        template["components"] = [
            {
                "type": "body",
                "parameters": [{"type": "text", "text": str(p)} for p in params],
            }
        ]
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "template",
        "template": template,
    }


class WhatsAppClient:
    def __init__(
        self,
        config: WhatsAppConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or get_whatsapp_config()
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def config(self) -> WhatsAppConfig:
        return self._config

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(self._config.request_timeout_seconds)
            )
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def send_text_sync(self, to: str, body: str) -> str | None:
        return self._post(build_text_payload(to, body))

    def send_template_sync(
        self,
        to: str,
        name: str,
        params: Sequence[str] | None = None,
        language: str = "en",
    ) -> str | None:
        return self._post(build_template_payload(to, name, params, language))

    async def send_text(self, to: str, body: str) -> str | None:
        """Send a plain text message; returns the provider message id."""
        return await anyio.to_thread.run_sync(self.send_text_sync, to, body)

    async def send_template(
        self,
        to: str,
        name: str,
        params: Sequence[str] | None = None,
        language: str = "en",
    ) -> str | None:
        return await anyio.to_thread.run_sync(
            self.send_template_sync, to, name, params, language
        )

    def _post(self, payload: dict[str, Any]) -> str | None:
        if not self._config.is_configured:
            raise WhatsAppNotConfiguredError()

        client = self._get_client()
        headers = {
            "Authorization": f"Bearer {self._config.token}",
            "Content-Type": "application/json",
        }

        try:
            response = client.post(self._config.messages_url(), json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.exception("HTTP error sending WhatsApp message", extra={"to": payload.get("to")})
            raise WhatsAppSendError(f"HTTP error: {e!s}", status_code=502) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.status_code >= 400:
            message = (data.get("error") or {}).get("message") or "Failed to send message"
            logger.error(
                "WhatsApp send failed",
                extra={"status_code": response.status_code, "error": message},
            )
            raise WhatsAppSendError(message, status_code=response.status_code, provider_response=data)

        messages = data.get("messages") or [{}]
        message_id = messages[0].get("id")
        logger.info(
            "WhatsApp message sent",
            extra={"message_type": payload.get("type"), "message_id": message_id},
        )
        return message_id
