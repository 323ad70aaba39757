import asyncio
import json
import math

import httpx

from conftest import CLAUDE_KEY, OPENAI_KEY, MemoryStore, claude_body, mock_client
from contentgen.credentials import CredentialResolver
from contentgen.dispatcher import ContentDispatcher
from contentgen.providers import build_registry
from contentgen.schemas import GenerationRequest
from contentgen.settings import settings


def _dispatcher(handler, env_keys=None, store=None, timeout_seconds=5.0):
	return ContentDispatcher(
		build_registry(settings),
		CredentialResolver(env_keys or {}, store),
		client=mock_client(handler),
		timeout_seconds=timeout_seconds,
	)


def _run(dispatcher, **fields):
	return asyncio.run(dispatcher.generate(GenerationRequest(**fields)))


def _never_called(request):
	raise AssertionError(f"unexpected network call to {request.url}")


def test_unknown_provider_fails_without_network():
	dispatcher = _dispatcher(_never_called, {"claude": CLAUDE_KEY})

	result = _run(dispatcher, provider="unknown-vendor", prompt="봄꽃")

	assert result.success is False
	assert result.error_type == "unsupported_provider"
	assert "unknown-vendor" in result.error


def test_missing_key_answers_with_mock_vocabulary():
	dispatcher = _dispatcher(_never_called)

	result = _run(dispatcher, provider="claude", contentType="vocabulary", prompt="민들레")

	assert result.success is True
	assert result.mock is True
	assert result.provider == "claude"
	vocabulary = result.content.data["vocabularyList"]
	assert vocabulary
	for entry in vocabulary:
		assert entry["word"] and entry["meaning"] and entry["difficulty"]


def test_claude_json_reply_with_reported_usage():
	seen = {}

	def handler(request):
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json=claude_body('{"title": "봄", "mainContent": {"introduction": "꽃"}}', 42))

	dispatcher = _dispatcher(handler, {"claude": CLAUDE_KEY})
	result = _run(dispatcher, provider="claude", contentType="reading", prompt="봄꽃", contentLength=321)

	assert result.success is True
	assert result.mock is False
	assert result.content.data["title"] == "봄"
	assert result.tokens_used == 42
	assert "정확히 321자" in seen["body"]["messages"][0]["content"]


def test_usage_estimated_when_vendor_omits_it():
	reply = '{"title": "어휘 분석 결과", "vocabularyList": []}'

	def handler(request):
		return httpx.Response(200, json={"choices": [{"message": {"content": reply}}]})

	dispatcher = _dispatcher(handler, {"openai": OPENAI_KEY})
	result = _run(dispatcher, provider="gpt", contentType="vocabulary", prompt="지문")

	assert result.provider == "openai"
	assert result.tokens_used == math.ceil(len(reply) / 2.5)


def test_prose_reply_is_recovered():
	def handler(request):
		return httpx.Response(200, json=claude_body("봄꽃 이야기\n개나리가 핍니다."))

	dispatcher = _dispatcher(handler, {"claude": CLAUDE_KEY})
	result = _run(dispatcher, provider="claude", contentType="grammar", prompt="봄")

	assert result.success is True
	assert result.content.recovered is True
	assert result.content.data["title"] == "봄꽃 이야기"


def test_vendor_error_becomes_failed_result():
	def handler(request):
		return httpx.Response(503, json={"error": {"message": "overloaded"}})

	dispatcher = _dispatcher(handler, {"openai": OPENAI_KEY})
	result = _run(dispatcher, provider="openai", prompt="봄꽃")

	assert result.success is False
	assert result.error_type == "transport_error"
	assert "overloaded" in result.error
	assert result.to_payload()["errorType"] == "transport_error"


def test_empty_reply_is_malformed_response():
	def handler(request):
		return httpx.Response(200, json=claude_body(""))

	dispatcher = _dispatcher(handler, {"claude": CLAUDE_KEY})
	result = _run(dispatcher, provider="claude", prompt="봄꽃")

	assert result.success is False
	assert result.error_type == "malformed_response"


def test_slow_vendor_times_out_once():
	calls = []

	async def handler(request):
		calls.append(request)
		await asyncio.sleep(1)
		return httpx.Response(200, json=claude_body("{}"))

	dispatcher = _dispatcher(handler, {"claude": CLAUDE_KEY}, timeout_seconds=0.05)
	result = _run(dispatcher, provider="claude", prompt="봄꽃")

	assert result.success is False
	assert result.error_type == "transport_error"
	assert "timed out" in result.error
	assert len(calls) == 1


def test_stored_key_usage_is_counted():
	def handler(request):
		assert request.headers["Authorization"] == f"Bearer {OPENAI_KEY}"
		return httpx.Response(200, json={"choices": [{"message": {"content": '{"title": "x"}'}}]})

	store = MemoryStore({"openai": OPENAI_KEY})
	dispatcher = _dispatcher(handler, store=store)
	result = _run(dispatcher, provider="openai", prompt="봄꽃")

	assert result.success is True
	assert store.usage == {"openai": 1}


def test_item_count_reaches_vendor_prompt():
	seen = {}

	def handler(request):
		seen["prompt"] = json.loads(request.content)["messages"][0]["content"]
		return httpx.Response(200, json=claude_body('{"title": "문해력 문제", "problems": []}'))

	dispatcher = _dispatcher(handler, {"claude": CLAUDE_KEY})
	result = _run(
		dispatcher,
		provider="claude",
		contentType="reading_problems",
		prompt="환경을 보호해야 합니다.",
		count=4,
		problemTypes=["vocabulary"],
	)

	assert result.success is True
	assert "- 문제 수: 4개" in seen["prompt"]
	assert "- 요청한 문제 유형: vocabulary" in seen["prompt"]
