"""
Error types and handling utilities for the Vectorius chat backend.

Every :class:`ChatError` knows the HTTP status it maps to, so the API layer
can turn it into a ``{"error": ...}`` response without a lookup table.
"""
import functools
from typing import Any, Callable, Type, Union, Tuple

from .logger import get_logger

logger = get_logger(__name__)


class ChatError(Exception):
    """Base exception for failures that end a chat request."""

    status_code = 500


class ChatNotEnabledError(ChatError):
    status_code = 503

    def __init__(self, message: str = "Chat is not enabled. Missing Azure OpenAI configuration."):
        super().__init__(message)


class InvalidQuestionError(ChatError):
    status_code = 400

    def __init__(self, message: str = "Invalid 'question'"):
        super().__init__(message)


class PromptNotFoundError(ChatError):
    """A prompt template could not be loaded."""

    def __init__(self, name: str):
        super().__init__(f"Prompt template not found: {name}")
        self.name = name


class UpstreamCompletionError(ChatError):
    """The chat completion deployment answered with a non-success status."""

    status_code = 502

    def __init__(self, status: int, body: str):
        super().__init__(f"Azure OpenAI error: {status} {body}")
        self.status = status
        self.body = body


class AttachmentRejectedError(ChatError):
    """An uploaded file failed type or size validation."""

    status_code = 400


class StorageError(Exception):
    """Base exception for object storage errors."""
    pass


def degrade_on_error(
    what: str,
    default_value: Any = None,
    error_types: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
) -> Callable:
    """Decorator for optional steps: log the failure of *what* and return *default_value*.

    Used where a failure must shrink the answer rather than fail the request,
    e.g. image context for a chat turn.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except error_types as e:
                logger.warning(f"{what} failed ({type(e).__name__}: {e}); continuing without it")
                return default_value
        return wrapper
    return decorator
