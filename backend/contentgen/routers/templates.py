from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ContentType, Difficulty
from ..template_store import (
	create_template,
	delete_template,
	get_template,
	list_templates,
	template_to_dict,
	update_template,
)
from .auth import Admin, get_current_admin


router = APIRouter(prefix="/templates", tags=["templates"])


class TemplateCreate(BaseModel):
	title: str = Field(min_length=1, max_length=256)
	content_type: ContentType = "reading"
	difficulty: Difficulty = "intermediate"
	target_age: str = "elem1"
	template_prompt: str = Field(min_length=1)
	variables: List[str] = Field(default_factory=list)


class TemplateUpdate(BaseModel):
	title: Optional[str] = Field(default=None, min_length=1, max_length=256)
	content_type: Optional[ContentType] = None
	difficulty: Optional[Difficulty] = None
	target_age: Optional[str] = None
	template_prompt: Optional[str] = Field(default=None, min_length=1)
	variables: Optional[List[str]] = None
	is_active: Optional[bool] = None


@router.get("")
def list_all(
	include_inactive: bool = False,
	admin: Admin = Depends(get_current_admin),
	db: Session = Depends(get_db),
):
	return {"templates": [template_to_dict(t) for t in list_templates(db, include_inactive=include_inactive)]}


@router.get("/{template_id}")
def get_one(template_id: int, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	row = get_template(db, template_id)
	if row is None:
		raise HTTPException(status_code=404, detail="Template not found")
	return template_to_dict(row)


@router.post("", status_code=201)
def create(req: TemplateCreate, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	row = create_template(db, req.model_dump())
	return template_to_dict(row)


@router.put("/{template_id}")
def update(
	template_id: int,
	req: TemplateUpdate,
	admin: Admin = Depends(get_current_admin),
	db: Session = Depends(get_db),
):
	row = get_template(db, template_id)
	if row is None:
		raise HTTPException(status_code=404, detail="Template not found")
	changes = {k: v for k, v in req.model_dump(exclude_unset=True).items() if v is not None}
	row = update_template(db, row, changes)
	return template_to_dict(row)


@router.delete("/{template_id}")
def delete(template_id: int, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	row = get_template(db, template_id)
	if row is None:
		raise HTTPException(status_code=404, detail="Template not found")
	delete_template(db, row)
	return {"ok": True}
