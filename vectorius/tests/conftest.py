import os, sys, tempfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Point the ORM at a throw-away SQLite file *before* vectorius.memory is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="vectorius-tests-"))
os.environ["VECTORIUS_DB"] = f"sqlite:///{_TMP_DIR / 'vectorius_test.db'}"

from vectorius.config import ChatSettings  # noqa: E402
from vectorius.memory.db import reset_db  # noqa: E402

from .fakes import FakeSupabase  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_db():
    reset_db()
    yield


@pytest.fixture
def chat_settings():
    return ChatSettings(
        endpoint="https://example.openai.azure.com",
        api_key="test-key",
        deployment="gpt-4o-chat",
        vision_deployment="gpt-4o-vision",
    )


@pytest.fixture
def supabase():
    return FakeSupabase(tokens={"token-alice": "alice", "token-bob": "bob"})
