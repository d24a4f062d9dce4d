"""Request handling for one tutoring chat turn.

Flow:
1. Check that the chat deployment is configured (503 otherwise)
2. Validate the question (400 otherwise) and pick the interaction mode
3. Resolve image context for an attachment, if any (never fatal)
4. Load the system and mode prompts (fatal if missing)
5. Assemble the conversation and call the chat deployment (502 on failure)
6. Return ``{reply, role, modeUsed}``
"""

from typing import Any, Callable, Dict

import openai

from vectorius.config import HISTORY_WINDOW, ChatSettings
from vectorius.llm.completion import complete
from vectorius.llm.modes import InteractionMode
from vectorius.llm.prompt_builder import build_messages, load_prompts, render_image_context
from vectorius.llm.vision import ImageContentExtractor
from vectorius.storage.attachments import default_attachment_storage
from vectorius.utils.error_handler import (
    ChatNotEnabledError,
    InvalidQuestionError,
    StorageError,
    degrade_on_error,
)
from vectorius.utils.logger import get_logger
from vectorius.utils.openai_client import get_openai_client

logger = get_logger(__name__)


def build_extractor(settings: ChatSettings) -> ImageContentExtractor:
    """Default extractor: Supabase Storage for signing, Azure OpenAI for vision.

    The Supabase client is shared across requests.
    """
    storage = default_attachment_storage()
    if storage is None:
        raise StorageError("Attachment storage is not configured")
    return ImageContentExtractor(settings, storage)


class ChatService:
    """Orchestrates prompt loading, image context and completion for a request."""

    def __init__(
        self,
        settings: ChatSettings,
        client_factory: Callable[[ChatSettings], openai.AzureOpenAI] = get_openai_client,
        extractor_factory: Callable[[ChatSettings], ImageContentExtractor] = build_extractor,
    ):
        self.settings = settings
        self.client_factory = client_factory
        self.extractor_factory = extractor_factory

    def is_enabled(self) -> bool:
        return self.settings.is_enabled()

    def handle(self, payload: Any) -> Dict[str, str]:
        """Answer one chat request body. Raises ChatError subclasses on failure."""
        if not self.is_enabled():
            raise ChatNotEnabledError()

        if not isinstance(payload, dict):
            payload = {}

        question = payload.get("question")
        if not question or not isinstance(question, str):
            raise InvalidQuestionError()

        mode = InteractionMode.parse(payload.get("mode"))

        history = payload.get("history")
        if not isinstance(history, list):
            history = []
        history = history[-HISTORY_WINDOW:]

        image_text = ""
        attachment_id = payload.get("attachmentId")
        if isinstance(attachment_id, str) and attachment_id:
            image_text = self._extract_image_text(attachment_id)

        system_prompt, mode_prompt = load_prompts(mode)
        messages = build_messages(
            system_prompt,
            mode_prompt,
            render_image_context(image_text),
            history,
            question,
        )

        reply = complete(
            messages,
            mode,
            client=self.client_factory(self.settings),
            deployment=self.settings.deployment,
        )
        return {"reply": reply, "role": "assistant", "modeUsed": mode.value}

    @degrade_on_error("Image extraction", default_value="")
    def _extract_image_text(self, attachment_id: str) -> str:
        # Any failure here means "no image context", never a failed turn.
        return self.extractor_factory(self.settings).extract(attachment_id)
