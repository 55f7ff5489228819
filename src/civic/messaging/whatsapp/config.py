"""
WhatsApp Cloud API configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WhatsAppConfig(BaseSettings):
    """WhatsApp Cloud API settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="WHATSAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Webhook verification handshake
    verify_token: str = Field(default="")

    # Outbound credentials
    token: str = Field(default="")
    phone_number_id: str = Field(default="")

    api_base_url: str = Field(default="https://graph.facebook.com")
    api_version: str = Field(default="v18.0")
    request_timeout_seconds: float = Field(default=15.0, gt=0, le=120)

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.phone_number_id)

    def messages_url(self) -> str:
        base = self.api_base_url.rstrip("/")
        return f"{base}/{self.api_version}/{self.phone_number_id}/messages"


def get_whatsapp_config() -> WhatsAppConfig:
    return WhatsAppConfig()
