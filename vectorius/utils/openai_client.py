"""Azure OpenAI client factory for the chat and vision deployments."""

import openai

from vectorius.config import ChatSettings


def get_openai_client(settings: ChatSettings) -> openai.AzureOpenAI:
    """Initialize and return an Azure OpenAI client for *settings*.

    Retries are disabled: a failed call surfaces immediately to the caller,
    which decides whether the failure is fatal for the chat turn.

    Raises:
        ValueError: If the endpoint or API key is missing
    """
    if not (settings.endpoint and settings.api_key):
        raise ValueError(
            "Azure OpenAI is not configured. Please set AZURE_OPENAI_ENDPOINT "
            "and AZURE_OPENAI_API_KEY."
        )

    return openai.AzureOpenAI(
        azure_endpoint=settings.endpoint,
        api_key=settings.api_key,
        api_version=settings.api_version,
        max_retries=0,
    )
