from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .encryption import KeyCipher
from .models import ApiKey


logger = logging.getLogger(__name__)


class SqlCredentialStore:
	"""Encrypted API keys in the ``api_keys`` table."""

	def __init__(self, session_factory: Callable[[], Session], cipher: KeyCipher) -> None:
		self._session_factory = session_factory
		self._cipher = cipher

	def get(self, provider: str) -> Optional[str]:
		db = self._session_factory()
		try:
			row = db.get(ApiKey, provider)
			if row is None or not row.is_active:
				return None
			encrypted = row.encrypted_key
		except SQLAlchemyError:
			logger.exception("Failed to fetch %s API key from the key store", provider)
			return None
		finally:
			db.close()
		return self._cipher.decrypt(encrypted)

	def put(self, provider: str, secret: str) -> None:
		db = self._session_factory()
		try:
			row = db.get(ApiKey, provider)
			if row is None:
				row = ApiKey(provider=provider, encrypted_key=self._cipher.encrypt(secret))
			else:
				row.encrypted_key = self._cipher.encrypt(secret)
				row.is_active = True
			db.add(row)
			db.commit()
		except SQLAlchemyError:
			db.rollback()
			raise
		finally:
			db.close()
		logger.info("Stored %s API key", provider)

	def deactivate(self, provider: str) -> bool:
		db = self._session_factory()
		try:
			row = db.get(ApiKey, provider)
			if row is None or not row.is_active:
				return False
			row.is_active = False
			db.add(row)
			db.commit()
		except SQLAlchemyError:
			db.rollback()
			raise
		finally:
			db.close()
		logger.info("Deactivated %s API key", provider)
		return True

	def increment_usage(self, provider: str) -> None:
		db = self._session_factory()
		try:
			db.execute(
				update(ApiKey)
				.where(ApiKey.provider == provider)
				.values(usage_count=ApiKey.usage_count + 1)
			)
			db.commit()
		except SQLAlchemyError:
			db.rollback()
			raise
		finally:
			db.close()

	def describe(self) -> List[Dict[str, object]]:
		db = self._session_factory()
		try:
			rows = db.query(ApiKey).order_by(ApiKey.provider).all()
			return [
				{
					"provider": row.provider,
					"isActive": row.is_active,
					"usageCount": row.usage_count,
					"updatedAt": row.updated_at.isoformat() if row.updated_at else None,
				}
				for row in rows
			]
		finally:
			db.close()
