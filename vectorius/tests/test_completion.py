import pytest

from vectorius.llm.completion import complete
from vectorius.llm.modes import InteractionMode
from vectorius.utils.error_handler import UpstreamCompletionError

from .fakes import FakeOpenAI, make_status_error

MESSAGES = [
    {"role": "system", "content": "SYS"},
    {"role": "system", "content": "MODE"},
    {"role": "user", "content": "What is 2+2?"},
]


@pytest.mark.parametrize(
    "mode, temperature",
    [
        ("tutor", 0.4),
        ("checker", 0.2),
        ("explainer", 0.5),
        ("grade", 0.2),
        ("parent_explainer", 0.4),
    ],
)
def test_mode_temperature(mode, temperature):
    client = FakeOpenAI()

    complete(MESSAGES, InteractionMode.parse(mode), client=client, deployment="chat")

    assert client.calls[0]["temperature"] == temperature


@pytest.mark.parametrize("value", ["socratic", "", None, 3, "TUTOR"])
def test_unknown_mode_defaults_to_tutor(value):
    assert InteractionMode.parse(value) is InteractionMode.TUTOR


def test_parent_modes():
    assert InteractionMode.GRADE.is_parent
    assert InteractionMode.PARENT_EXPLAINER.is_parent
    assert not InteractionMode.TUTOR.is_parent


def test_complete_sends_single_non_streaming_request():
    client = FakeOpenAI(reply="4")

    reply = complete(MESSAGES, InteractionMode.TUTOR, client=client, deployment="gpt-4o-chat")

    assert reply == "4"
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["model"] == "gpt-4o-chat"
    assert call["messages"] == MESSAGES
    assert call["n"] == 1
    assert call["stream"] is False


def test_missing_content_becomes_empty_string():
    client = FakeOpenAI(reply=None)
    assert complete(MESSAGES, InteractionMode.TUTOR, client=client, deployment="chat") == ""


def test_upstream_failure_carries_status_and_body():
    client = FakeOpenAI(error=make_status_error(429, "Rate limit exceeded"))

    with pytest.raises(UpstreamCompletionError) as exc_info:
        complete(MESSAGES, InteractionMode.CHECKER, client=client, deployment="chat")

    err = exc_info.value
    assert err.status == 429
    assert err.status_code == 502
    assert str(err) == "Azure OpenAI error: 429 Rate limit exceeded"
