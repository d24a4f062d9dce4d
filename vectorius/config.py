"""
Configuration module for the Vectorius chat backend.

This module centralizes all configuration settings, loading values from
environment variables (and a local ``.env`` file) with sensible defaults.
Azure OpenAI settings are read at call time through :class:`ChatSettings`
so the backend can be switched on and off without a restart.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env file
load_dotenv()

# Azure OpenAI
DEFAULT_AZURE_API_VERSION = "2024-02-15-preview"

# Chat pipeline
HISTORY_WINDOW = 18  # 9 user/assistant exchanges
VISION_TEMPERATURE = 0.2
VISION_MAX_TOKENS = 1000

# Object storage
ATTACHMENTS_BUCKET = os.getenv("VECTORIUS_ATTACHMENTS_BUCKET", "chat-attachments")
EXTRACTION_URL_TTL_SECONDS = 300
ATTACHMENT_URL_TTL_SECONDS = 600
MAX_UPLOAD_BYTES = 8 * 1024 * 1024  # 8 MB
ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/heic", "image/heif"})
ATTACHMENT_RETENTION_DAYS = 7

# Paths
PACKAGE_DIR = Path(__file__).resolve().parent
PROMPTS_DIR = Path(os.getenv("VECTORIUS_PROMPTS_DIR", PACKAGE_DIR / "prompts"))


class ChatSettings(BaseModel):
    """Azure OpenAI connection settings for the chat and vision deployments."""

    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    deployment: Optional[str] = None
    vision_deployment: Optional[str] = None
    api_version: str = DEFAULT_AZURE_API_VERSION

    @classmethod
    def from_env(cls) -> "ChatSettings":
        deployment = os.getenv("AZURE_OPENAI_DEPLOYMENT")
        return cls(
            endpoint=os.getenv("AZURE_OPENAI_ENDPOINT"),
            api_key=os.getenv("AZURE_OPENAI_API_KEY"),
            deployment=deployment,
            vision_deployment=os.getenv("AZURE_OPENAI_VISION_DEPLOYMENT") or deployment,
            api_version=os.getenv("AZURE_OPENAI_API_VERSION") or DEFAULT_AZURE_API_VERSION,
        )

    def is_enabled(self) -> bool:
        """True when the chat completion deployment is fully configured."""
        return bool(self.endpoint and self.api_key and self.deployment)

    def vision_enabled(self) -> bool:
        return bool(self.endpoint and self.api_key and self.vision_deployment)


class StorageSettings(BaseModel):
    """Supabase project used for attachment storage and auth."""

    url: Optional[str] = None
    service_role_key: Optional[str] = None
    bucket: str = ATTACHMENTS_BUCKET

    @classmethod
    def from_env(cls) -> "StorageSettings":
        return cls(
            url=os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL"),
            service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        )

    def is_configured(self) -> bool:
        return bool(self.url and self.service_role_key)
