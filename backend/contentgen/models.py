from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from .db import Base


class AdminUser(Base):
	__tablename__ = "admin_users"
	email = Column(String(256), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	role = Column(String(32), default="admin", nullable=False)
	is_active = Column(Boolean, default=True, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ApiKey(Base):
	__tablename__ = "api_keys"
	# One row per provider; rotating a key overwrites it
	provider = Column(String(32), primary_key=True)
	encrypted_key = Column(Text, nullable=False)  # JSON {encrypted, iv, authTag}
	is_active = Column(Boolean, default=True, nullable=False)
	usage_count = Column(Integer, default=0, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ReadingTemplate(Base):
	__tablename__ = "reading_templates"
	id = Column(Integer, primary_key=True, autoincrement=True)
	title = Column(String(256), nullable=False)
	content_type = Column(String(32), default="reading", nullable=False)
	difficulty = Column(String(32), default="intermediate", nullable=False)
	target_age = Column(String(32), default="elem1", nullable=False)
	template_prompt = Column(Text, nullable=False)
	variables = Column(Text, nullable=True)  # JSON list of placeholder names
	is_active = Column(Boolean, default=True, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class GenerationLog(Base):
	__tablename__ = "ai_generation_logs"
	id = Column(Integer, primary_key=True, autoincrement=True)
	template_id = Column(Integer, nullable=True)
	prompt = Column(Text, nullable=True)
	content_type = Column(String(32), nullable=True)
	ai_provider = Column(String(32), nullable=True)
	generated_content = Column(Text, nullable=True)  # JSON string snapshot
	tokens_used = Column(Integer, default=0, nullable=False)
	cost_estimate = Column(Float, default=0.0, nullable=False)
	success = Column(Boolean, default=True, nullable=False)
	error_message = Column(Text, nullable=True)
	generation_ms = Column(Integer, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
