import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import OPENAI_KEY, mock_client
from contentgen.credentials import CredentialResolver
from contentgen.dispatcher import ContentDispatcher
from contentgen.main import app
from contentgen.providers import build_registry
from contentgen.routers.auth import Admin, get_current_admin
from contentgen.services import get_dispatcher
from contentgen.settings import settings


@pytest.fixture
def client():
	with TestClient(app) as c:
		yield c
	app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
	app.dependency_overrides[get_current_admin] = lambda: Admin(email="editor@example.org")
	return client


def _failing_dispatcher(status_code):
	def handler(request):
		return httpx.Response(status_code, json={"error": {"message": "upstream says no"}})

	return ContentDispatcher(
		build_registry(settings),
		CredentialResolver({"openai": OPENAI_KEY}),
		client=mock_client(handler),
	)


def _create_template(client, **overrides):
	body = {
		"title": "동물 지문",
		"content_type": "reading",
		"difficulty": "beginner",
		"target_age": "elem2",
		"template_prompt": "{{animal}}에 대한 이야기",
		"variables": ["animal"],
	}
	body.update(overrides)
	r = client.post("/templates", json=body)
	assert r.status_code == 201
	return r.json()


def test_info(client):
	r = client.get("/info")

	assert r.status_code == 200
	assert r.json()["status"] == "ok"
	assert sorted(r.json()["providers"]) == ["claude", "gemini", "openai"]


def test_public_generate_without_keys_returns_mock(client):
	r = client.post("/ai/generate", json={"prompt": "봄에 피는 꽃", "contentType": "reading", "contentLength": 300})

	assert r.status_code == 200
	body = r.json()
	assert body["success"] is True
	assert body["mock"] is True
	assert body["provider"] == "openai"
	assert len(body["content"]["mainContent"]["introduction"]) == 300
	assert body["metadata"]["contentLength"] == 300


def test_public_generate_requires_prompt(client):
	r = client.post("/ai/generate", json={"contentType": "reading"})

	assert r.status_code == 422


def test_unknown_provider_is_bad_request(client):
	r = client.post("/ai/generate", json={"prompt": "봄", "provider": "mistral"})

	assert r.status_code == 400
	assert r.json()["detail"]["errorType"] == "unsupported_provider"


def test_vendor_failure_maps_to_bad_gateway(client):
	app.dependency_overrides[get_dispatcher] = lambda: _failing_dispatcher(500)

	r = client.post("/ai/generate", json={"prompt": "봄", "provider": "openai"})

	assert r.status_code == 502
	detail = r.json()["detail"]
	assert detail["success"] is False
	assert detail["errorType"] == "transport_error"
	assert "upstream says no" in detail["error"]


def test_admin_routes_require_token(client):
	assert client.post("/ai/generate-direct", json={"prompt": "봄"}).status_code == 401
	assert client.get("/templates").status_code == 401
	assert client.get("/admin/api-keys").status_code == 401


def test_seed_admin_login(client):
	r = client.post("/auth/token", data={"username": "admin@example.org", "password": "correct horse"})
	assert r.status_code == 200
	token = r.json()["access_token"]

	me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
	assert me.status_code == 200
	assert me.json() == {"email": "admin@example.org", "role": "admin"}

	bad = client.post("/auth/token", data={"username": "admin@example.org", "password": "wrong"})
	assert bad.status_code == 401


def test_generate_direct_defaults_to_claude(admin_client):
	r = admin_client.post("/ai/generate-direct", json={"prompt": "민들레", "contentType": "vocabulary"})

	assert r.status_code == 200
	assert r.json()["provider"] == "claude"
	assert r.json()["content"]["vocabularyList"]


def test_template_crud(admin_client):
	created = _create_template(admin_client)
	tid = created["id"]
	assert created["variables"] == ["animal"]

	r = admin_client.put(f"/templates/{tid}", json={"title": "바뀐 제목", "difficulty": None})
	assert r.status_code == 200
	assert r.json()["title"] == "바뀐 제목"
	assert r.json()["difficulty"] == "beginner"

	assert [t["id"] for t in admin_client.get("/templates").json()["templates"]] == [tid]

	assert admin_client.delete(f"/templates/{tid}").status_code == 200
	assert admin_client.get(f"/templates/{tid}").status_code == 404


def test_generate_from_template(admin_client):
	tid = _create_template(admin_client)["id"]

	r = admin_client.post("/ai/generate-from-template", json={"templateId": tid, "variables": {"animal": "축구공"}})

	assert r.status_code == 200
	body = r.json()
	assert body["metadata"]["templateUsed"] == "동물 지문"
	assert body["content"]["title"] == "스포츠와 건강"

	missing = admin_client.post("/ai/generate-from-template", json={"templateId": 9999})
	assert missing.status_code == 404


def test_generate_batch(admin_client):
	reading = _create_template(admin_client)["id"]
	quiz = _create_template(admin_client, title="퀴즈", content_type="quiz", template_prompt="{{topic}} 퀴즈")["id"]

	r = admin_client.post(
		"/ai/generate-batch",
		json={
			"jobs": [
				{"templateId": reading, "variables": {"animal": "토끼"}},
				{"templateId": 4242},
				{"templateId": quiz, "variables": {"topic": "봄"}, "provider": "gemini"},
			]
		},
	)

	assert r.status_code == 200
	body = r.json()
	assert body["totalJobs"] == 3
	assert body["successCount"] == 2
	assert [item["templateId"] for item in body["results"]] == [reading, 4242, quiz]
	assert body["results"][1] == {"success": False, "templateId": 4242, "error": "Template not found"}
	assert body["results"][2]["provider"] == "gemini"


def test_empty_batch_is_rejected(admin_client):
	assert admin_client.post("/ai/generate-batch", json={"jobs": []}).status_code == 400


def test_history_records_generations(admin_client):
	admin_client.post("/ai/generate", json={"prompt": "가" * 150, "contentType": "quiz"})
	admin_client.post("/ai/generate", json={"prompt": "봄", "provider": "mistral"})

	r = admin_client.get("/ai/history", params={"limit": 10})

	history = r.json()["history"]
	assert len(history) == 2
	failed, succeeded = history
	assert failed["success"] is False
	assert failed["error"]
	assert succeeded["success"] is True
	assert succeeded["contentType"] == "quiz"
	assert succeeded["content"]["exercises"]


def test_api_key_lifecycle(admin_client):
	assert admin_client.put("/admin/api-keys/openai", json={"apiKey": "your_openai_key"}).status_code == 400
	assert admin_client.put("/admin/api-keys/mistral", json={"apiKey": OPENAI_KEY}).status_code == 404

	r = admin_client.put("/admin/api-keys/openai", json={"apiKey": OPENAI_KEY})
	assert r.status_code == 200

	listing = admin_client.get("/admin/api-keys").json()
	assert listing["keys"][0]["provider"] == "openai"
	assert listing["keys"][0]["isActive"] is True
	assert listing["status"]["openai"] == {"available": True, "source": "store"}
	assert OPENAI_KEY not in str(listing)

	assert admin_client.delete("/admin/api-keys/openai").status_code == 200
	assert admin_client.get("/ai/providers/status").json()["openai"] == {"available": False, "source": None}
	assert admin_client.delete("/admin/api-keys/openai").status_code == 404


def test_oversized_content_length_is_rejected(client):
	r = client.post("/ai/generate", json={"prompt": "봄", "contentType": "reading", "contentLength": 2_000_000})

	assert r.status_code == 422


@pytest.mark.parametrize("path", ["/ai/extract-vocabulary", "/ai/generate-problems", "/ai/analyze-text"])
def test_literacy_routes_require_text(client, path):
	assert client.post(path, json={"grade": "elem4"}).status_code == 400
	assert client.post(path, json={"text": "   "}).status_code == 400


def test_extract_vocabulary(client):
	r = client.post("/ai/extract-vocabulary", json={"text": "과학자는 현미경으로 세포를 관찰했습니다.", "grade": "elem5", "count": 3})

	assert r.status_code == 200
	body = r.json()
	assert body["success"] is True
	assert len(body["content"]["vocabularyList"]) == 3
	assert body["metadata"]["extractedCount"] == 3
	assert body["metadata"]["provider"] == "openai"


def test_generate_problems(client):
	r = client.post(
		"/ai/generate-problems",
		json={"text": "환경을 보호해야 합니다.", "count": 2, "problemTypes": ["comprehension"]},
	)

	assert r.status_code == 200
	body = r.json()
	assert len(body["content"]["problems"]) == 2
	assert body["metadata"]["problemCount"] == 2
	assert body["metadata"]["types"] == ["comprehension"]


def test_analyze_text(client):
	text = "따뜻한 봄이 오면 여러 가지 예쁜 꽃들이 피어납니다."

	r = client.post("/ai/analyze-text", json={"text": text, "grade": 4})

	assert r.status_code == 200
	body = r.json()
	assert body["content"]["analysis"]["totalScore"]
	assert body["metadata"]["textLength"] == len(text)


def test_analyze_text_falls_back_when_reply_is_prose(client):
	def handler(request):
		return httpx.Response(200, json={"choices": [{"message": {"content": "분석을 완료했습니다.\n난이도는 보통입니다."}}]})

	app.dependency_overrides[get_dispatcher] = lambda: ContentDispatcher(
		build_registry(settings),
		CredentialResolver({"openai": OPENAI_KEY}),
		client=mock_client(handler),
	)
	text = "가" * 450

	r = client.post("/ai/analyze-text", json={"text": text, "grade": "elem2"})

	assert r.status_code == 200
	analysis = r.json()["content"]["analysis"]
	assert analysis["readingTime"] == 3
	assert analysis["recommendedGrades"] == ["elem2"]


def test_literacy_route_vendor_failure(client):
	app.dependency_overrides[get_dispatcher] = lambda: _failing_dispatcher(503)

	r = client.post("/ai/generate-problems", json={"text": "지문"})

	assert r.status_code == 502
	assert r.json()["detail"]["errorType"] == "transport_error"
