import os

# Settings are read once at import time; pin a hermetic environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CLAUDE_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["ENCRYPTION_KEY"] = "11" * 32
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["SEED_ADMIN_EMAIL"] = "admin@example.org"
os.environ["SEED_ADMIN_PASSWORD"] = "correct horse"
os.environ["AI_REQUEST_TIMEOUT_SECONDS"] = "5"

import httpx
import pytest

from contentgen.db import Base, engine
from contentgen import models  # noqa: F401  registers tables


CLAUDE_KEY = "sk-ant-api03-" + "a" * 60
OPENAI_KEY = "sk-proj-" + "b" * 50
GEMINI_KEY = "AIzaSy" + "c" * 33


class MemoryStore:
	"""In-memory credential store that counts lookups."""

	def __init__(self, keys=None):
		self.keys = dict(keys or {})
		self.active = {name: True for name in self.keys}
		self.usage = {}
		self.get_calls = 0

	def get(self, provider):
		self.get_calls += 1
		if not self.active.get(provider):
			return None
		return self.keys.get(provider)

	def put(self, provider, secret):
		self.keys[provider] = secret
		self.active[provider] = True

	def deactivate(self, provider):
		if not self.active.get(provider):
			return False
		self.active[provider] = False
		return True

	def increment_usage(self, provider):
		self.usage[provider] = self.usage.get(provider, 0) + 1


def mock_client(handler):
	return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def claude_body(text, output_tokens=None):
	body = {"content": [{"type": "text", "text": text}]}
	if output_tokens is not None:
		body["usage"] = {"input_tokens": 10, "output_tokens": output_tokens}
	return body


@pytest.fixture(autouse=True)
def fresh_tables():
	Base.metadata.drop_all(bind=engine)
	Base.metadata.create_all(bind=engine)
	yield
