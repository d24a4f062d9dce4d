"""Fake Azure OpenAI and Supabase clients shared by the tests."""
from types import SimpleNamespace

import httpx
import openai

# ---------------------------------------------------------------------------
# Fake Azure OpenAI client
# ---------------------------------------------------------------------------


def make_status_error(status: int, body: str) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://example.openai.azure.com/openai/deployments/test/chat/completions")
    response = httpx.Response(status, text=body, request=request)
    return openai.APIStatusError(f"Error code: {status}", response=response, body=None)


class FakeCompletions:
    def __init__(self, reply="Let's work through it together.", error=None, model="gpt-4o", total_tokens=120):
        self.reply = reply
        self.error = error
        self.model = model
        self.total_tokens = total_tokens
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(role="assistant", content=self.reply)
        return SimpleNamespace(
            choices=[SimpleNamespace(index=0, message=message)],
            model=self.model,
            usage=SimpleNamespace(total_tokens=self.total_tokens),
        )


class FakeOpenAI:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


# ---------------------------------------------------------------------------
# Fake Supabase client (storage + auth)
# ---------------------------------------------------------------------------


class FakeBucket:
    def __init__(self):
        self.objects = {}
        self.signed = []
        self.removed = []
        self.fail_sign = False
        self.fail_upload = False
        self.fail_remove = False

    def create_signed_url(self, path, expires_in):
        if self.fail_sign:
            raise RuntimeError("signing unavailable")
        self.signed.append((path, expires_in))
        return {"signedURL": f"https://storage.test/sign/{path}?token=abc", "signedUrl": f"https://storage.test/sign/{path}?token=abc"}

    def upload(self, path, data, file_options=None):
        if self.fail_upload:
            raise RuntimeError("bucket unavailable")
        self.objects[path] = (data, file_options)
        return SimpleNamespace(path=path)

    def remove(self, paths):
        if self.fail_remove:
            raise RuntimeError("bucket unavailable")
        self.removed.append(list(paths))
        for p in paths:
            self.objects.pop(p, None)
        return []


class FakeAuth:
    def __init__(self, tokens):
        self.tokens = tokens

    def get_user(self, jwt=None):
        if jwt not in self.tokens:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[jwt]))


class FakeSupabase:
    def __init__(self, tokens=None):
        self.bucket = FakeBucket()
        self.auth = FakeAuth(tokens or {})
        self.storage = SimpleNamespace(from_=lambda name: self.bucket)

