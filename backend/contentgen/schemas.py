from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .settings import settings


PROVIDERS: List[str] = ["claude", "gemini", "openai"]
PROVIDER_ALIASES: Dict[str, str] = {"anthropic": "claude", "gpt": "openai"}

CONTENT_TYPES: List[str] = [
	"reading",
	"vocabulary",
	"questions",
	"answers",
	"grammar",
	"quiz",
	"analysis",
	"vocabulary_extraction",
	"reading_problems",
]
DIFFICULTIES: List[str] = ["beginner", "intermediate", "advanced"]

ContentType = Literal[
	"reading",
	"vocabulary",
	"questions",
	"answers",
	"grammar",
	"quiz",
	"analysis",
	"vocabulary_extraction",
	"reading_problems",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]


def canonical_provider(name: str) -> str:
	key = (name or "").strip().lower()
	return PROVIDER_ALIASES.get(key, key)


class GenerationRequest(BaseModel):
	"""One content request. Accepts the camelCase names the editor sends."""

	model_config = ConfigDict(populate_by_name=True, frozen=True)

	provider: str = "claude"
	content_type: ContentType = Field(
		default="reading", validation_alias=AliasChoices("contentType", "content_type")
	)
	difficulty: Difficulty = "intermediate"
	target_audience: str = Field(
		default="elem1", validation_alias=AliasChoices("targetAudience", "targetAge", "target_audience")
	)
	desired_length: int = Field(
		default_factory=lambda: settings.default_content_length,
		ge=1,
		le=settings.max_content_length,
		validation_alias=AliasChoices("contentLength", "desiredLength", "desired_length"),
	)
	prompt_text: str = Field(validation_alias=AliasChoices("prompt", "promptText", "prompt_text"))
	# Passage-based types only: how many words or problems to produce
	item_count: Optional[int] = Field(
		default=None, ge=1, le=30, validation_alias=AliasChoices("count", "itemCount", "item_count")
	)
	problem_types: Tuple[str, ...] = Field(
		default=(), validation_alias=AliasChoices("problemTypes", "problem_types")
	)

	@field_validator("target_audience", mode="before")
	@classmethod
	def _audience_to_str(cls, value: Any) -> str:
		# The editor sometimes sends a bare age number
		return str(value).strip() if value is not None else "elem1"

	@field_validator("prompt_text")
	@classmethod
	def _prompt_not_blank(cls, value: str) -> str:
		if not value or not value.strip():
			raise ValueError("prompt must not be empty")
		return value


@dataclass(frozen=True)
class TextContent:
	text: str
	kind: str = "text"

	def to_payload(self) -> Any:
		return self.text


@dataclass(frozen=True)
class StructuredContent:
	data: Any
	# True when the structure was rebuilt from prose by the line-splitting fallback
	recovered: bool = False
	kind: str = "structured"

	def to_payload(self) -> Any:
		return self.data


Content = Union[TextContent, StructuredContent]


@dataclass(frozen=True)
class NormalizedResult:
	success: bool
	provider: str
	content: Content = field(default_factory=lambda: TextContent(""))
	tokens_used: int = 0
	error: Optional[str] = None
	error_type: Optional[str] = None
	mock: bool = False

	def to_payload(self) -> Dict[str, Any]:
		payload: Dict[str, Any] = {
			"success": self.success,
			"content": self.content.to_payload(),
			"provider": self.provider,
			"tokensUsed": self.tokens_used,
		}
		if self.error is not None:
			payload["error"] = self.error
			payload["errorType"] = self.error_type
		if self.mock:
			payload["mock"] = True
		return payload
