from __future__ import annotations
import logging
import math
import time
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from sqlalchemy.orm import Session

from ..batch import BatchJob, run_batch
from ..db import SessionLocal, get_db
from ..dispatcher import ContentDispatcher
from ..history import list_history, record_generation
from ..prompts import fill_template
from ..schemas import GenerationRequest, NormalizedResult
from ..services import Services, get_dispatcher, get_services
from ..settings import settings
from ..template_store import get_template, template_loader
from .auth import Admin, get_current_admin


router = APIRouter(prefix="/ai", tags=["ai_generation"])

logger = logging.getLogger(__name__)

_ERROR_STATUS: Dict[str, int] = {
	"unsupported_provider": 400,
	"transport_error": 502,
	"malformed_response": 502,
}


class PublicGenerateRequest(GenerationRequest):
	provider: str = "openai"


class DirectGenerateRequest(GenerationRequest):
	provider: str = "claude"


class TemplateGenerateRequest(BaseModel):
	template_id: int = Field(validation_alias=AliasChoices("templateId", "template_id"))
	variables: Dict[str, Any] = Field(default_factory=dict)
	provider: str = "claude"


class BatchJobIn(BaseModel):
	template_id: Any = Field(validation_alias=AliasChoices("templateId", "template_id"))
	variables: Dict[str, Any] = Field(default_factory=dict)
	provider: Optional[str] = None


class BatchRequest(BaseModel):
	jobs: List[BatchJobIn]


class PassageRequest(BaseModel):
	text: Optional[str] = None
	grade: str = "elem4"
	count: Optional[int] = Field(default=None, ge=1, le=30)
	problem_types: List[str] = Field(
		default_factory=lambda: ["comprehension", "vocabulary"],
		validation_alias=AliasChoices("problemTypes", "problem_types"),
	)
	provider: str = "openai"

	@field_validator("grade", mode="before")
	@classmethod
	def _grade_to_str(cls, value: Any) -> str:
		return str(value).strip() if value is not None else "elem4"


def _raise_for_failure(result: NormalizedResult) -> None:
	if not result.success:
		raise HTTPException(status_code=_ERROR_STATUS.get(result.error_type or "", 500), detail=result.to_payload())


def _elapsed_ms(started: float) -> int:
	return int((time.monotonic() - started) * 1000)


def _items_from(content: Any, key: str) -> List[Any]:
	if isinstance(content, dict) and isinstance(content.get(key), list):
		return content[key]
	if isinstance(content, list):
		return content
	return []


def _fallback_analysis(text: str, grade: str) -> Dict[str, Any]:
	return {
		"title": "문해력 난이도 분석 결과",
		"analysis": {
			"vocabularyLevel": 5,
			"sentenceComplexity": 5,
			"contentLevel": 5,
			"readingTime": math.ceil(len(text) / 200),
			"recommendedGrades": [grade],
			"totalScore": 5.0,
		},
		"feedback": "분석 결과를 파싱할 수 없습니다.",
		"recommendations": [],
	}


async def _generate_for_passage(
	req: PassageRequest,
	content_type: str,
	dispatcher: ContentDispatcher,
	db: Session,
	*,
	default_count: Optional[int] = None,
) -> Tuple[str, NormalizedResult]:
	text = (req.text or "").strip()
	if not text:
		raise HTTPException(status_code=400, detail="Text is required")
	try:
		gen_request = GenerationRequest(
			provider=req.provider,
			content_type=content_type,
			target_audience=req.grade,
			prompt_text=text,
			item_count=req.count or default_count,
			problem_types=tuple(req.problem_types),
		)
	except ValidationError as exc:
		raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))
	started = time.monotonic()
	result = await dispatcher.generate(gen_request)
	record_generation(
		db,
		result=result,
		prompt=text,
		content_type=content_type,
		generation_ms=_elapsed_ms(started),
		prompt_limit=100,
	)
	_raise_for_failure(result)
	return text, result


@router.post("/generate")
async def generate(
	req: PublicGenerateRequest,
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	started = time.monotonic()
	result = await dispatcher.generate(req)
	elapsed = _elapsed_ms(started)
	# Anonymous callers: keep only the head of the prompt
	record_generation(
		db, result=result, prompt=req.prompt_text, content_type=req.content_type, generation_ms=elapsed, prompt_limit=100
	)
	_raise_for_failure(result)
	payload = result.to_payload()
	payload["metadata"] = {
		"provider": result.provider,
		"tokensUsed": result.tokens_used,
		"generationTime": elapsed,
		"contentLength": req.desired_length,
	}
	return payload


@router.post("/extract-vocabulary")
async def extract_vocabulary(
	req: PassageRequest,
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	_, result = await _generate_for_passage(req, "vocabulary_extraction", dispatcher, db, default_count=10)
	vocabulary = _items_from(result.content.to_payload(), "vocabularyList")
	return {
		"success": True,
		"content": {"vocabularyList": vocabulary},
		"metadata": {
			"provider": result.provider,
			"tokensUsed": result.tokens_used,
			"extractedCount": len(vocabulary),
		},
	}


@router.post("/generate-problems")
async def generate_problems(
	req: PassageRequest,
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	_, result = await _generate_for_passage(req, "reading_problems", dispatcher, db, default_count=5)
	problems = _items_from(result.content.to_payload(), "problems")
	return {
		"success": True,
		"content": {"problems": problems},
		"metadata": {
			"provider": result.provider,
			"tokensUsed": result.tokens_used,
			"problemCount": len(problems),
			"types": req.problem_types,
		},
	}


@router.post("/analyze-text")
async def analyze_text(
	req: PassageRequest,
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	text, result = await _generate_for_passage(req, "analysis", dispatcher, db)
	content = result.content.to_payload()
	if getattr(result.content, "recovered", False) or not isinstance(content, dict):
		content = _fallback_analysis(text, req.grade)
	return {
		"success": True,
		"content": content,
		"metadata": {
			"provider": result.provider,
			"tokensUsed": result.tokens_used,
			"textLength": len(text),
		},
	}


@router.post("/generate-direct")
async def generate_direct(
	req: DirectGenerateRequest,
	admin: Admin = Depends(get_current_admin),
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	started = time.monotonic()
	result = await dispatcher.generate(req)
	elapsed = _elapsed_ms(started)
	record_generation(db, result=result, prompt=req.prompt_text, content_type=req.content_type, generation_ms=elapsed)
	_raise_for_failure(result)
	payload = result.to_payload()
	payload["metadata"] = {"provider": result.provider, "tokensUsed": result.tokens_used, "generationTime": elapsed}
	return payload


@router.post("/generate-from-template")
async def generate_from_template(
	req: TemplateGenerateRequest,
	admin: Admin = Depends(get_current_admin),
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
	db: Session = Depends(get_db),
):
	template = get_template(db, req.template_id)
	if template is None or not template.is_active:
		raise HTTPException(status_code=404, detail="Template not found")
	prompt = fill_template(template.template_prompt, req.variables)
	try:
		gen_request = GenerationRequest(
			provider=req.provider,
			content_type=template.content_type,
			difficulty=template.difficulty,
			target_audience=template.target_age,
			prompt_text=prompt,
		)
	except ValidationError as exc:
		raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))

	started = time.monotonic()
	result = await dispatcher.generate(gen_request)
	elapsed = _elapsed_ms(started)
	record_generation(
		db,
		result=result,
		prompt=prompt,
		content_type=template.content_type,
		template_id=template.id,
		generation_ms=elapsed,
	)
	_raise_for_failure(result)
	payload = result.to_payload()
	payload["metadata"] = {
		"provider": result.provider,
		"tokensUsed": result.tokens_used,
		"generationTime": elapsed,
		"templateUsed": template.title,
	}
	return payload


@router.post("/generate-batch")
async def generate_batch(
	req: BatchRequest,
	admin: Admin = Depends(get_current_admin),
	dispatcher: ContentDispatcher = Depends(get_dispatcher),
):
	if not req.jobs:
		raise HTTPException(status_code=400, detail="Jobs array is required")
	jobs = [BatchJob(template_id=j.template_id, variables=j.variables, provider=j.provider) for j in req.jobs]
	results = await run_batch(
		jobs,
		dispatcher,
		template_loader(SessionLocal),
		concurrency=settings.batch_concurrency,
	)
	success_count = sum(1 for r in results if r.success)
	logger.info("Batch generation by %s: %d/%d succeeded", admin.email, success_count, len(results))
	return {
		"success": True,
		"totalJobs": len(jobs),
		"successCount": success_count,
		"results": [r.to_payload() for r in results],
	}


@router.get("/history")
def history(
	limit: int = Query(default=50, ge=1, le=200),
	offset: int = Query(default=0, ge=0),
	admin: Admin = Depends(get_current_admin),
	db: Session = Depends(get_db),
):
	return {"success": True, "history": list_history(db, limit=limit, offset=offset)}


@router.get("/providers/status")
def provider_status(services: Services = Depends(get_services)):
	return services.resolver.status(services.registry.names())
