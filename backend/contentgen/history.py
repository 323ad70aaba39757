from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import GenerationLog
from .schemas import NormalizedResult


logger = logging.getLogger(__name__)


# USD per 1K tokens; usage is not split into input/output, so the output rate is used
COST_PER_1K_TOKENS: Dict[str, Dict[str, float]] = {
	"claude": {"input": 0.003, "output": 0.015},
	"gemini": {"input": 0.00025, "output": 0.0005},
	"openai": {"input": 0.001, "output": 0.002},
}


def estimate_cost(provider: str, tokens: int) -> float:
	rate = COST_PER_1K_TOKENS.get(provider, COST_PER_1K_TOKENS["openai"])
	return round((tokens / 1000) * rate["output"], 6)


def record_generation(
	db: Session,
	*,
	result: NormalizedResult,
	prompt: str,
	content_type: str,
	template_id: Optional[int] = None,
	generation_ms: Optional[int] = None,
	prompt_limit: Optional[int] = None,
) -> None:
	"""Append one row to the generation log. Logging failures never fail the request."""
	content = result.content.to_payload() if result.success else None
	row = GenerationLog(
		template_id=template_id,
		prompt=prompt[:prompt_limit] if prompt_limit else prompt,
		content_type=content_type,
		ai_provider=result.provider,
		generated_content=json.dumps(content, ensure_ascii=False) if content is not None else None,
		tokens_used=result.tokens_used,
		cost_estimate=estimate_cost(result.provider, result.tokens_used),
		success=result.success,
		error_message=result.error,
		generation_ms=generation_ms,
	)
	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		logger.exception("Failed to save generation log")


def list_history(db: Session, *, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
	rows = (
		db.query(GenerationLog)
		.order_by(GenerationLog.created_at.desc(), GenerationLog.id.desc())
		.offset(offset)
		.limit(limit)
		.all()
	)
	return [
		{
			"id": row.id,
			"templateId": row.template_id,
			"contentType": row.content_type,
			"provider": row.ai_provider,
			"tokensUsed": row.tokens_used,
			"costEstimate": row.cost_estimate,
			"success": row.success,
			"error": row.error_message,
			"generationMs": row.generation_ms,
			"content": json.loads(row.generated_content) if row.generated_content else None,
			"createdAt": row.created_at.isoformat() if row.created_at else None,
		}
		for row in rows
	]
