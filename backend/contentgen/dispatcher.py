from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from .credentials import CredentialResolver
from .errors import GenerationError, MalformedResponseError, ProviderTransportError
from .mock import MockResponder
from .normalizer import estimate_tokens, normalize_reply
from .prompts import build_prompt
from .providers import ProviderRegistry
from .schemas import GenerationRequest, NormalizedResult


logger = logging.getLogger(__name__)


class ContentDispatcher:
	"""Routes a generation request to a vendor adapter or the mock responder.

	``generate`` never raises for vendor, credential or parsing problems: every
	outcome is a ``NormalizedResult``; failures carry ``error`` and ``error_type``.
	Exactly one vendor call is made per request and nothing is retried.
	"""

	def __init__(
		self,
		registry: ProviderRegistry,
		resolver: CredentialResolver,
		*,
		client: Optional[httpx.AsyncClient] = None,
		mock: Optional[MockResponder] = None,
		timeout_seconds: float = 60.0,
	) -> None:
		self.registry = registry
		self.resolver = resolver
		self.mock = mock or MockResponder()
		self.timeout_seconds = timeout_seconds
		self._owns_client = client is None
		self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

	async def generate(self, request: GenerationRequest) -> NormalizedResult:
		try:
			return await self._generate(request)
		except GenerationError as err:
			logger.warning("AI generation failed (%s, %s): %s", request.provider, err.kind, err.message)
			message = err.message
			if isinstance(err, MalformedResponseError) and err.excerpt:
				message = f"{message}: {err.excerpt!r}"
			return NormalizedResult(
				success=False,
				provider=err.provider or request.provider,
				error=message,
				error_type=err.kind,
			)
		except Exception as exc:
			logger.exception("Unexpected error during %s generation", request.provider)
			return NormalizedResult(
				success=False,
				provider=request.provider,
				error=str(exc) or exc.__class__.__name__,
				error_type="internal_error",
			)

	async def _generate(self, request: GenerationRequest) -> NormalizedResult:
		adapter = self.registry.get(request.provider)
		credential = await asyncio.to_thread(self.resolver.resolve, adapter.name)
		if credential is None:
			return self.mock.respond(request)

		bundle = build_prompt(
			request.prompt_text,
			request.content_type,
			difficulty=request.difficulty,
			target_audience=request.target_audience,
			desired_length=request.desired_length,
			item_count=request.item_count,
			problem_types=request.problem_types,
		)
		logger.debug(
			"Sending %s prompt to %s (%d chars, key %s...)",
			request.content_type,
			adapter.name,
			len(bundle.text),
			credential.secret[:6],
		)
		try:
			reply = await asyncio.wait_for(
				adapter.send(self._client, bundle.text, credential.secret),
				timeout=self.timeout_seconds,
			)
		except asyncio.TimeoutError as exc:
			raise ProviderTransportError(
				f"{adapter.name} API request timed out after {self.timeout_seconds:g}s",
				provider=adapter.name,
			) from exc
		await asyncio.to_thread(self.resolver.record_usage, credential)

		content = normalize_reply(reply.text, provider=adapter.name)
		tokens = reply.tokens_used if reply.tokens_used is not None else estimate_tokens(reply.text)
		logger.info(
			"Generated %s with %s: prompt %d chars, %d tokens%s",
			request.content_type,
			adapter.name,
			len(request.prompt_text),
			tokens,
			" (recovered from prose)" if getattr(content, "recovered", False) else "",
		)
		return NormalizedResult(success=True, provider=adapter.name, content=content, tokens_used=int(tokens))

	async def aclose(self) -> None:
		if self._owns_client:
			await self._client.aclose()
