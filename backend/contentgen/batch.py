from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .dispatcher import ContentDispatcher
from .prompts import fill_template
from .schemas import GenerationRequest
from .template_store import TemplateSpec


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchJob:
	template_id: Any
	variables: Dict[str, Any] = field(default_factory=dict)
	provider: Optional[str] = None


@dataclass(frozen=True)
class BatchItemResult:
	success: bool
	template_id: Any
	content: Any = None
	tokens_used: Optional[int] = None
	provider: Optional[str] = None
	error: Optional[str] = None

	def to_payload(self) -> Dict[str, Any]:
		payload: Dict[str, Any] = {"success": self.success, "templateId": self.template_id}
		if self.success:
			payload.update({"content": self.content, "tokensUsed": self.tokens_used, "provider": self.provider})
		else:
			payload["error"] = self.error
		return payload


TemplateLookup = Callable[[Any], Optional[TemplateSpec]]


async def _run_job(
	job: BatchJob,
	dispatcher: ContentDispatcher,
	lookup: TemplateLookup,
	default_provider: str,
) -> BatchItemResult:
	template = await asyncio.to_thread(lookup, job.template_id)
	if template is None:
		return BatchItemResult(success=False, template_id=job.template_id, error="Template not found")
	try:
		request = GenerationRequest(
			provider=job.provider or default_provider,
			content_type=template.content_type,
			difficulty=template.difficulty,
			target_audience=template.target_age,
			prompt_text=fill_template(template.template_prompt, job.variables),
		)
	except ValidationError as exc:
		return BatchItemResult(success=False, template_id=job.template_id, error=f"Invalid template: {exc.errors()[0]['msg']}")
	result = await dispatcher.generate(request)
	if not result.success:
		return BatchItemResult(success=False, template_id=job.template_id, provider=result.provider, error=result.error)
	return BatchItemResult(
		success=True,
		template_id=job.template_id,
		content=result.content.to_payload(),
		tokens_used=result.tokens_used,
		provider=result.provider,
	)


async def run_batch(
	jobs: Sequence[BatchJob],
	dispatcher: ContentDispatcher,
	lookup: TemplateLookup,
	*,
	default_provider: str = "claude",
	concurrency: int = 1,
) -> List[BatchItemResult]:
	"""Run every job; results line up with ``jobs`` and one failure never stops the rest.

	``concurrency=1`` processes jobs strictly one after another.
	"""
	semaphore = asyncio.Semaphore(max(1, concurrency))

	async def _guarded(job: BatchJob) -> BatchItemResult:
		async with semaphore:
			try:
				return await _run_job(job, dispatcher, lookup, default_provider)
			except Exception as exc:
				logger.exception("Batch job for template %s failed", job.template_id)
				return BatchItemResult(success=False, template_id=job.template_id, error=str(exc))

	return list(await asyncio.gather(*(_guarded(job) for job in jobs)))
