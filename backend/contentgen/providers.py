from __future__ import annotations
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

import httpx

from .errors import MalformedResponseError, ProviderTransportError, UnsupportedProviderError
from .schemas import canonical_provider
from .settings import Settings, settings


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "당신은 한국어 교육 전문가입니다. 항상 JSON 형식으로만 응답하세요."


@dataclass(frozen=True)
class WireRequest:
	url: str
	json: Dict[str, Any]
	headers: Dict[str, str] = field(default_factory=dict)
	params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderReply:
	text: str
	# Vendor-reported usage; None when the reply carried no usage block
	tokens_used: Optional[int] = None


def _vendor_message(response: httpx.Response) -> str:
	try:
		data = response.json()
	except ValueError:
		return response.text[:200]
	error = data.get("error") if isinstance(data, dict) else None
	if isinstance(error, dict) and error.get("message"):
		return str(error["message"])
	if isinstance(error, str):
		return error
	return response.text[:200]


class ProviderAdapter:
	"""Wire format for one vendor's chat-style completion endpoint."""

	name = "base"

	def __init__(self, *, model: str, temperature: float = 0.7, max_tokens: int = 4096) -> None:
		self.model = model
		self.temperature = temperature
		self.max_tokens = max_tokens

	def build_request(self, prompt: str, secret: str) -> WireRequest:
		raise NotImplementedError

	def parse_reply(self, data: Dict[str, Any]) -> ProviderReply:
		raise NotImplementedError

	async def send(self, client: httpx.AsyncClient, prompt: str, secret: str) -> ProviderReply:
		wire = self.build_request(prompt, secret)
		try:
			r = await client.post(wire.url, params=wire.params, headers=wire.headers, json=wire.json)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			status = http_err.response.status_code
			raise ProviderTransportError(
				f"{self.name} API error {status}: {_vendor_message(http_err.response)}",
				provider=self.name,
				status_code=status,
			) from http_err
		except httpx.TimeoutException as timeout_err:
			raise ProviderTransportError(f"{self.name} API request timed out", provider=self.name) from timeout_err
		except httpx.RequestError as net_err:
			raise ProviderTransportError(f"{self.name} API request failed: {net_err}", provider=self.name) from net_err
		try:
			data = r.json()
		except ValueError as exc:
			raise MalformedResponseError(
				f"{self.name} returned a non-JSON body", provider=self.name, excerpt=r.text[:200]
			) from exc
		try:
			return self.parse_reply(data)
		except (KeyError, IndexError, TypeError, AttributeError) as exc:
			raise MalformedResponseError(
				f"Unexpected {self.name} response shape", provider=self.name, excerpt=r.text[:200]
			) from exc


class ClaudeAdapter(ProviderAdapter):
	name = "claude"
	url = "https://api.anthropic.com/v1/messages"
	api_version = "2023-06-01"

	def build_request(self, prompt: str, secret: str) -> WireRequest:
		return WireRequest(
			url=self.url,
			headers={
				"x-api-key": secret,
				"anthropic-version": self.api_version,
				"content-type": "application/json",
			},
			json={
				"model": self.model,
				"max_tokens": self.max_tokens,
				"temperature": self.temperature,
				"messages": [{"role": "user", "content": prompt}],
			},
		)

	def parse_reply(self, data: Dict[str, Any]) -> ProviderReply:
		blocks = data["content"]
		text = "".join(b.get("text", "") for b in blocks if b.get("type", "text") == "text")
		usage = data.get("usage") or {}
		return ProviderReply(text=text, tokens_used=usage.get("output_tokens"))


class OpenAIAdapter(ProviderAdapter):
	name = "openai"
	url = "https://api.openai.com/v1/chat/completions"

	def build_request(self, prompt: str, secret: str) -> WireRequest:
		return WireRequest(
			url=self.url,
			headers={"Authorization": f"Bearer {secret}", "Content-Type": "application/json"},
			json={
				"model": self.model,
				"messages": [
					{"role": "system", "content": SYSTEM_PROMPT},
					{"role": "user", "content": prompt},
				],
				"temperature": self.temperature,
				"max_tokens": self.max_tokens,
				"response_format": {"type": "json_object"},
			},
		)

	def parse_reply(self, data: Dict[str, Any]) -> ProviderReply:
		text = data["choices"][0]["message"]["content"] or ""
		usage = data.get("usage") or {}
		return ProviderReply(text=text, tokens_used=usage.get("total_tokens"))


class GeminiAdapter(ProviderAdapter):
	name = "gemini"

	def __init__(
		self,
		*,
		model: str,
		temperature: float = 0.7,
		max_tokens: int = 4096,
		mode: str = "ai_studio",
		vertex_region: str = "us-central1",
		vertex_project: Optional[str] = None,
	) -> None:
		super().__init__(model=model, temperature=temperature, max_tokens=max_tokens)
		if mode == "vertex":
			project = vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.url = (
				f"https://{vertex_region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{vertex_region}/publishers/google/models/{model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.url = f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
			self._auth_in_query = True

	def build_request(self, prompt: str, secret: str) -> WireRequest:
		params: Dict[str, str] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = secret
		else:
			headers["x-goog-api-key"] = secret
		return WireRequest(
			url=self.url,
			params=params,
			headers=headers,
			json={
				"contents": [{"parts": [{"text": prompt}]}],
				"generationConfig": {
					"temperature": self.temperature,
					"topP": 0.8,
					"topK": 40,
					"maxOutputTokens": self.max_tokens,
				},
			},
		)

	def parse_reply(self, data: Dict[str, Any]) -> ProviderReply:
		parts = data["candidates"][0]["content"]["parts"]
		text = "".join(p.get("text", "") for p in parts)
		usage = data.get("usageMetadata") or {}
		return ProviderReply(text=text, tokens_used=usage.get("totalTokenCount"))


class ProviderRegistry:
	"""Immutable name -> adapter mapping, built once at startup."""

	def __init__(self, adapters: Mapping[str, ProviderAdapter]) -> None:
		self._adapters = MappingProxyType(dict(adapters))

	def get(self, name: str) -> ProviderAdapter:
		adapter = self._adapters.get(canonical_provider(name))
		if adapter is None:
			raise UnsupportedProviderError(name)
		return adapter

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and canonical_provider(name) in self._adapters

	def __iter__(self) -> Iterator[str]:
		return iter(self._adapters)

	def names(self) -> List[str]:
		return list(self._adapters)


def build_registry(cfg: Optional[Settings] = None) -> ProviderRegistry:
	cfg = cfg or settings
	common = {"temperature": cfg.temperature, "max_tokens": cfg.max_output_tokens}
	return ProviderRegistry(
		{
			"claude": ClaudeAdapter(model=cfg.claude_model, **common),
			"gemini": GeminiAdapter(
				model=cfg.gemini_model,
				mode=cfg.gemini_provider,
				vertex_region=cfg.vertex_region,
				vertex_project=cfg.vertex_project,
				**common,
			),
			"openai": OpenAIAdapter(model=cfg.openai_model, **common),
		}
	)
