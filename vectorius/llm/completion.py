"""Chat completion calls against the Azure OpenAI chat deployment."""

from typing import Dict, List

import openai

from vectorius.llm.modes import InteractionMode
from vectorius.utils.error_handler import UpstreamCompletionError
from vectorius.utils.logger import get_logger

logger = get_logger(__name__)


def complete(
    messages: List[Dict[str, str]],
    mode: InteractionMode,
    *,
    client: openai.AzureOpenAI,
    deployment: str,
) -> str:
    """Send *messages* to the chat deployment and return the reply text.

    The sampling temperature comes from *mode*. A non-success response is
    raised as :class:`UpstreamCompletionError` with the upstream status and
    body so the API can report it verbatim.
    """
    logger.info(
        "Calling Azure OpenAI chat completion | deployment=%s | mode=%s | messages=%d",
        deployment,
        mode.value,
        len(messages),
    )
    try:
        response = client.chat.completions.create(
            model=deployment,
            messages=messages,
            temperature=mode.temperature,
            n=1,
            stream=False,
        )
    except openai.APIStatusError as e:
        logger.error("Azure OpenAI chat completion failed: %s %s", e.status_code, e.response.text)
        raise UpstreamCompletionError(e.status_code, e.response.text) from e

    if not response.choices:
        return ""
    return response.choices[0].message.content or ""
