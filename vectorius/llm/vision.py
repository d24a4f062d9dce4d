"""Extract educational content from homework photos with the vision deployment.

Extraction results are cached in the ``image_extractions`` table: once a row
exists for an attachment the vision model is never called for it again.
Every failure path returns an empty string so a broken image never blocks a
chat turn.
"""

from __future__ import annotations

from typing import Callable

import openai

from vectorius.config import (
    ChatSettings,
    EXTRACTION_URL_TTL_SECONDS,
    VISION_MAX_TOKENS,
    VISION_TEMPERATURE,
)
from vectorius.llm.prompt_builder import render_prompt
from vectorius.memory import crud
from vectorius.storage.attachments import AttachmentStorage
from vectorius.utils.logger import get_logger
from vectorius.utils.openai_client import get_openai_client

logger = get_logger(__name__)

VISION_INSTRUCTION_TEMPLATE = "vision_instruction.jinja"


class ImageContentExtractor:
    """Turn an attachment id into text, calling the vision model at most once.

    Parameters
    ----------
    settings
        Azure OpenAI settings; vision is skipped when they are incomplete.
    storage
        Bucket wrapper used to sign a short-lived URL for the image.
    client_factory
        Builds the OpenAI client. Only invoked when a vision call is needed.
    """

    def __init__(
        self,
        settings: ChatSettings,
        storage: AttachmentStorage,
        client_factory: Callable[[ChatSettings], openai.AzureOpenAI] = get_openai_client,
    ):
        self.settings = settings
        self.storage = storage
        self.client_factory = client_factory

    def extract(self, attachment_id: str) -> str:
        cached = crud.get_extracted_text(attachment_id)
        if cached:
            logger.info("Image extraction cache hit for attachment %s", attachment_id)
            return cached

        attachment = crud.get_attachment(attachment_id)
        if not attachment or attachment["deleted_at"] is not None:
            logger.info("Attachment %s not found; continuing without image context", attachment_id)
            return ""

        image_url = self.storage.create_signed_url(
            attachment["storage_path"], EXTRACTION_URL_TTL_SECONDS
        )

        if not self.settings.vision_enabled():
            logger.info("Vision deployment not configured; skipping extraction")
            return ""

        text, model_used, tokens_used = self._call_vision(image_url)
        if not text:
            return ""

        crud.save_extraction(attachment_id, text, model_used=model_used, tokens_used=tokens_used)
        logger.info(
            "Stored image extraction for attachment %s | model=%s | tokens=%s",
            attachment_id,
            model_used,
            tokens_used,
        )
        return text

    def _call_vision(self, image_url: str) -> tuple[str, str | None, int | None]:
        instruction = render_prompt(VISION_INSTRUCTION_TEMPLATE)
        client = self.client_factory(self.settings)
        deployment = self.settings.vision_deployment

        try:
            response = client.chat.completions.create(
                model=deployment,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": instruction},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    }
                ],
                temperature=VISION_TEMPERATURE,
                max_tokens=VISION_MAX_TOKENS,
                stream=False,
            )
        except openai.APIStatusError as e:
            logger.warning("Vision extraction failed: %s %s", e.status_code, e.response.text)
            return "", None, None

        if not response.choices:
            return "", None, None
        text = (response.choices[0].message.content or "").strip()
        tokens_used = response.usage.total_tokens if response.usage else None
        return text, response.model or deployment, tokens_used
