import asyncio
import json

import httpx

from conftest import CLAUDE_KEY, claude_body, mock_client
from contentgen.batch import BatchJob, run_batch
from contentgen.credentials import CredentialResolver
from contentgen.dispatcher import ContentDispatcher
from contentgen.providers import build_registry
from contentgen.settings import settings
from contentgen.template_store import TemplateSpec


TEMPLATES = {
	1: TemplateSpec(1, "동물", "reading", "beginner", "elem1", "{{animal}}에 대한 글"),
	2: TemplateSpec(2, "어휘", "vocabulary", "intermediate", "elem3", "{{passage}}"),
	3: TemplateSpec(3, "퀴즈", "quiz", "advanced", "middle1", "{{topic}} 퀴즈"),
}


def _prompt_of(request):
	return json.loads(request.content)["messages"][0]["content"]


def _dispatcher(handler):
	return ContentDispatcher(
		build_registry(settings),
		CredentialResolver({"claude": CLAUDE_KEY}),
		client=mock_client(handler),
	)


def test_failing_job_does_not_stop_the_rest():
	def handler(request):
		if "고장" in _prompt_of(request):
			return httpx.Response(500, json={"error": {"message": "boom"}})
		return httpx.Response(200, json=claude_body('{"title": "ok"}', 5))

	jobs = [
		BatchJob(1, {"animal": "고양이"}),
		BatchJob(2, {"passage": "고장 난 지문"}),
		BatchJob(99, {}),
		BatchJob(3, {"topic": "우주"}),
	]

	results = asyncio.run(run_batch(jobs, _dispatcher(handler), TEMPLATES.get))

	assert [r.template_id for r in results] == [1, 2, 99, 3]
	assert [r.success for r in results] == [True, False, False, True]
	assert "boom" in results[1].error
	assert results[2].error == "Template not found"
	assert results[3].content == {"title": "ok"}
	assert results[3].to_payload() == {
		"success": True,
		"templateId": 3,
		"content": {"title": "ok"},
		"tokensUsed": 5,
		"provider": "claude",
	}


def test_job_provider_overrides_default():
	def handler(request):
		raise AssertionError("no network expected")

	jobs = [BatchJob(1, {"animal": "개"}, provider="openai"), BatchJob(1, {"animal": "개"}, provider="nope")]

	results = asyncio.run(run_batch(jobs, _dispatcher(handler), TEMPLATES.get))

	# openai has no key, so it is answered by the mock responder
	assert results[0].success is True
	assert results[0].provider == "openai"
	assert results[1].success is False
	assert "nope" in results[1].error


def test_lookup_errors_are_isolated():
	def lookup(template_id):
		if template_id == 2:
			raise RuntimeError("database is locked")
		return TEMPLATES.get(template_id)

	def handler(request):
		return httpx.Response(200, json=claude_body('{"title": "ok"}'))

	results = asyncio.run(run_batch([BatchJob(1, {}), BatchJob(2, {}), BatchJob(3, {})], _dispatcher(handler), lookup))

	assert [r.success for r in results] == [True, False, True]
	assert results[1].error == "database is locked"


def test_concurrent_batch_keeps_input_order():
	active = {"now": 0, "peak": 0}

	async def handler(request):
		active["now"] += 1
		active["peak"] = max(active["peak"], active["now"])
		# Earlier jobs finish last
		delay = 0.05 if "첫째" in _prompt_of(request) else 0.01
		await asyncio.sleep(delay)
		active["now"] -= 1
		return httpx.Response(200, json=claude_body(json.dumps({"prompt": _prompt_of(request)}, ensure_ascii=False)))

	jobs = [BatchJob(3, {"topic": name}) for name in ("첫째", "둘째", "셋째")]

	results = asyncio.run(run_batch(jobs, _dispatcher(handler), TEMPLATES.get, concurrency=3))

	assert [r.success for r in results] == [True, True, True]
	assert active["peak"] > 1
	for name, result in zip(("첫째", "둘째", "셋째"), results):
		assert name in result.content["prompt"]


def test_sequential_by_default():
	active = {"now": 0, "peak": 0}

	async def handler(request):
		active["now"] += 1
		active["peak"] = max(active["peak"], active["now"])
		await asyncio.sleep(0.01)
		active["now"] -= 1
		return httpx.Response(200, json=claude_body('{"title": "ok"}'))

	jobs = [BatchJob(3, {"topic": str(i)}) for i in range(4)]

	results = asyncio.run(run_batch(jobs, _dispatcher(handler), TEMPLATES.get))

	assert len(results) == 4
	assert active["peak"] == 1
