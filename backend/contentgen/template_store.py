from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from .models import ReadingTemplate


@dataclass(frozen=True)
class TemplateSpec:
	id: int
	title: str
	content_type: str
	difficulty: str
	target_age: str
	template_prompt: str

	@classmethod
	def from_row(cls, row: ReadingTemplate) -> "TemplateSpec":
		return cls(
			id=row.id,
			title=row.title,
			content_type=row.content_type,
			difficulty=row.difficulty,
			target_age=row.target_age,
			template_prompt=row.template_prompt,
		)


def template_to_dict(row: ReadingTemplate) -> Dict[str, Any]:
	return {
		"id": row.id,
		"title": row.title,
		"content_type": row.content_type,
		"difficulty": row.difficulty,
		"target_age": row.target_age,
		"template_prompt": row.template_prompt,
		"variables": json.loads(row.variables) if row.variables else [],
		"is_active": row.is_active,
		"created_at": row.created_at.isoformat() if row.created_at else None,
		"updated_at": row.updated_at.isoformat() if row.updated_at else None,
	}


def _coerce_id(template_id: Any) -> Optional[int]:
	try:
		return int(template_id)
	except (TypeError, ValueError):
		return None


def get_template(db: Session, template_id: Any) -> Optional[ReadingTemplate]:
	tid = _coerce_id(template_id)
	if tid is None:
		return None
	return db.get(ReadingTemplate, tid)


def list_templates(db: Session, *, include_inactive: bool = False) -> List[ReadingTemplate]:
	q = db.query(ReadingTemplate)
	if not include_inactive:
		q = q.filter(ReadingTemplate.is_active.is_(True))
	return q.order_by(ReadingTemplate.created_at.desc(), ReadingTemplate.id.desc()).all()


def create_template(db: Session, data: Dict[str, Any]) -> ReadingTemplate:
	values = dict(data)
	if "variables" in values:
		values["variables"] = json.dumps(values["variables"] or [], ensure_ascii=False)
	row = ReadingTemplate(**values)
	db.add(row)
	db.commit()
	db.refresh(row)
	return row


def update_template(db: Session, row: ReadingTemplate, data: Dict[str, Any]) -> ReadingTemplate:
	for key, value in data.items():
		if key == "variables":
			value = json.dumps(value or [], ensure_ascii=False)
		setattr(row, key, value)
	db.add(row)
	db.commit()
	db.refresh(row)
	return row


def delete_template(db: Session, row: ReadingTemplate) -> None:
	db.delete(row)
	db.commit()


def template_loader(session_factory: Callable[[], Session]) -> Callable[[Any], Optional[TemplateSpec]]:
	"""Lookup function for batch jobs; only active templates are usable."""

	def _load(template_id: Any) -> Optional[TemplateSpec]:
		db = session_factory()
		try:
			row = get_template(db, template_id)
			if row is None or not row.is_active:
				return None
			return TemplateSpec.from_row(row)
		finally:
			db.close()

	return _load
