from __future__ import annotations
import json
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CredentialDecryptError


logger = logging.getLogger(__name__)


def generate_encryption_key() -> str:
	return os.urandom(32).hex()


class KeyCipher:
	"""AES-256-GCM for API keys at rest.

	Records are stored as a JSON object ``{"encrypted", "iv", "authTag"}`` with
	hex-encoded fields, so rows written by earlier deployments stay readable.
	"""

	def __init__(self, secret_hex: Optional[str] = None) -> None:
		if not secret_hex:
			# Records written with a throwaway key cannot be read after a restart
			logger.warning("ENCRYPTION_KEY is not configured; using an ephemeral key")
			secret_hex = generate_encryption_key()
		try:
			key = bytes.fromhex(secret_hex)
		except ValueError as exc:
			raise ValueError("ENCRYPTION_KEY must be hex encoded") from exc
		if len(key) != 32:
			raise ValueError("ENCRYPTION_KEY must be 32 bytes (64 hex characters)")
		self._aead = AESGCM(key)

	def encrypt(self, plaintext: str) -> str:
		iv = os.urandom(16)
		sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
		ciphertext, tag = sealed[:-16], sealed[-16:]
		return json.dumps({"encrypted": ciphertext.hex(), "iv": iv.hex(), "authTag": tag.hex()})

	def decrypt(self, record: str) -> str:
		try:
			data = json.loads(record)
			iv = bytes.fromhex(data["iv"])
			sealed = bytes.fromhex(data["encrypted"]) + bytes.fromhex(data["authTag"])
			return self._aead.decrypt(iv, sealed, None).decode("utf-8")
		except (ValueError, KeyError, TypeError, InvalidTag) as exc:
			raise CredentialDecryptError("could not decrypt stored API key") from exc
