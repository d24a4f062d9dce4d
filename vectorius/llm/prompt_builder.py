from __future__ import annotations

"""Prompt construction helpers for the Vectorius tutoring chat.

All LLM-facing messages should be assembled via this module so we maintain
one single source of truth for system, mode and image-context prompts.

Templates live in ``vectorius/prompts/`` and use Jinja2 for simple variable
substitution.  A missing template is fatal for the request: we never fall
back to a default prompt.
"""

from typing import Any, Iterable, List, Dict, Tuple

import jinja2

from vectorius.config import PROMPTS_DIR
from vectorius.llm.modes import InteractionMode
from vectorius.utils.error_handler import PromptNotFoundError

# ---------------------------------------------------------------------------
# Jinja environment
# ---------------------------------------------------------------------------

# Lazy-initialised Jinja environment so we only pay the cost once.
_ENV: jinja2.Environment | None = None

IMAGE_CONTEXT_TEMPLATE = "image_context.jinja"


def _get_env() -> jinja2.Environment:
    global _ENV
    if _ENV is None:
        _ENV = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(PROMPTS_DIR)),
            autoescape=False,  # we do not render HTML
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
    return _ENV


def render_prompt(name: str, **kwargs: Any) -> str:
    """Render the prompt template *name*, raising PromptNotFoundError if absent."""
    try:
        template = _get_env().get_template(name)
    except jinja2.TemplateNotFound as exc:
        raise PromptNotFoundError(name) from exc
    return template.render(**kwargs).strip()


# ---------------------------------------------------------------------------
# Prompt store
# ---------------------------------------------------------------------------

def load_prompts(mode: InteractionMode) -> Tuple[str, str]:
    """Return ``(system_prompt, mode_prompt)`` for *mode*.

    Parent-facing modes get the parent system prompt, every other mode the
    student one.
    """
    system_prompt = render_prompt(mode.system_template)
    mode_prompt = render_prompt(mode.mode_template)
    return system_prompt, mode_prompt


def render_image_context(extracted_text: str) -> str:
    """Wrap text extracted from a homework photo in the image-context note."""
    if not extracted_text:
        return ""
    return render_prompt(IMAGE_CONTEXT_TEMPLATE, extracted_text=extracted_text)


# ---------------------------------------------------------------------------
# Public API – build the messages list
# ---------------------------------------------------------------------------

def normalize_history(history: Iterable[Any] | None) -> List[Dict[str, str]]:
    """Filter and normalise caller-supplied history entries.

    Entries without a string ``content`` are dropped; any role other than
    ``assistant`` or ``system`` becomes ``user``.
    """
    messages: List[Dict[str, str]] = []
    for entry in history or []:
        if not isinstance(entry, dict) or not isinstance(entry.get("content"), str):
            continue
        role = entry.get("role")
        if role not in ("assistant", "system"):
            role = "user"
        messages.append({"role": role, "content": entry["content"]})
    return messages


def build_messages(
    system_prompt: str,
    mode_prompt: str,
    image_context: str,
    history: Iterable[Any] | None,
    question: str,
) -> List[Dict[str, str]]:
    """Return a list of OpenAI ChatCompletion-style messages.

    Parameters
    ----------
    system_prompt
        General system prompt for the audience (student or parent).
    mode_prompt
        Instructions specific to the interaction mode.
    image_context
        Rendered image-context note; omitted when empty.
    history
        Previous chat turns, already trimmed by the caller.
    question
        The current question, always the last message.
    """
    messages: List[Dict[str, str]] = [
        {"role": "system", "content": system_prompt},
        {"role": "system", "content": mode_prompt},
    ]

    if image_context:
        messages.append({"role": "system", "content": image_context})

    # Inject previous chat turns so the model has the full conversation.
    messages.extend(normalize_history(history))

    # Finally the *current* user question.
    messages.append({"role": "user", "content": question})
    return messages
