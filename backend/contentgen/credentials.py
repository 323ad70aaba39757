"""Provider credential resolution.

Environment variables are authoritative; the encrypted key store is only
consulted when the environment has no usable key. Store lookups are cached per
provider for a bounded window and dropped as soon as a key is stored or
deactivated through the resolver.
"""

from __future__ import annotations
import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Protocol, Tuple

from .errors import CredentialDecryptError


logger = logging.getLogger(__name__)


PLACEHOLDER_MARKERS: Tuple[str, ...] = (
	"your_",
	"your-",
	"placeholder",
	"example",
	"test_key",
	"dummy",
	"fake",
	"api_key_here",
)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class KeyShapeRule:
	prefix: str = ""
	forbidden_prefix: str = ""
	# Keys must be strictly longer than this
	min_length: int = 20

	def accepts(self, key: str) -> bool:
		if self.prefix and not key.startswith(self.prefix):
			return False
		if self.forbidden_prefix and key.startswith(self.forbidden_prefix):
			return False
		return len(key) > self.min_length


KEY_SHAPE_RULES: Dict[str, KeyShapeRule] = {
	"claude": KeyShapeRule(prefix="sk-ant-", min_length=50),
	"openai": KeyShapeRule(prefix="sk-", forbidden_prefix="sk-ant-", min_length=40),
	"gemini": KeyShapeRule(forbidden_prefix="sk-", min_length=30),
}
DEFAULT_KEY_RULE = KeyShapeRule()


def clean_key(raw: Optional[str]) -> str:
	if raw is None:
		return ""
	return _CONTROL_CHARS_RE.sub("", str(raw).strip())


def is_placeholder(key: str) -> bool:
	lowered = key.lower()
	return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def validate_key(provider: str, raw: Optional[str]) -> Optional[str]:
	"""Return the cleaned key, or None when it must be treated as absent."""
	key = clean_key(raw)
	if not key:
		return None
	if is_placeholder(key):
		logger.info("Ignoring placeholder %s API key (%s...)", provider, key[:6])
		return None
	rule = KEY_SHAPE_RULES.get(provider, DEFAULT_KEY_RULE)
	if not rule.accepts(key):
		logger.info("Ignoring %s API key with unexpected shape (length %d)", provider, len(key))
		return None
	return key


@dataclass(frozen=True)
class ProviderCredential:
	provider: str
	secret: str
	source: str  # "env" or "store"

	def __repr__(self) -> str:
		return f"ProviderCredential(provider={self.provider!r}, source={self.source!r}, secret='{self.secret[:6]}...')"


class CredentialStore(Protocol):
	def get(self, provider: str) -> Optional[str]:
		...

	def put(self, provider: str, secret: str) -> None:
		...

	def deactivate(self, provider: str) -> bool:
		...

	def increment_usage(self, provider: str) -> None:
		...


class CredentialResolver:
	def __init__(
		self,
		env_keys: Mapping[str, Optional[str]],
		store: Optional[CredentialStore] = None,
		*,
		ttl_seconds: float = 300,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self._env_keys = dict(env_keys)
		self._store = store
		self._ttl = ttl_seconds
		self._clock = clock
		self._cache: Dict[str, Tuple[Optional[ProviderCredential], float]] = {}
		self._lock = threading.Lock()

	def resolve(self, provider: str) -> Optional[ProviderCredential]:
		env_key = validate_key(provider, self._env_keys.get(provider))
		if env_key:
			return ProviderCredential(provider=provider, secret=env_key, source="env")
		if self._store is None:
			return None
		entry = self._cache.get(provider)
		if entry is not None and self._clock() - entry[1] < self._ttl:
			return entry[0]
		with self._lock:
			# Another caller may have refreshed while we waited
			entry = self._cache.get(provider)
			if entry is not None and self._clock() - entry[1] < self._ttl:
				return entry[0]
			credential = self._fetch_from_store(provider)
			self._cache[provider] = (credential, self._clock())
			return credential

	def _fetch_from_store(self, provider: str) -> Optional[ProviderCredential]:
		try:
			raw = self._store.get(provider)
		except CredentialDecryptError:
			logger.exception("Stored %s API key could not be decrypted", provider)
			return None
		key = validate_key(provider, raw)
		if not key:
			return None
		return ProviderCredential(provider=provider, secret=key, source="store")

	def invalidate(self, provider: Optional[str] = None) -> None:
		with self._lock:
			if provider is None:
				self._cache.clear()
			else:
				self._cache.pop(provider, None)

	def store_key(self, provider: str, secret: str) -> ProviderCredential:
		if self._store is None:
			raise RuntimeError("no credential store configured")
		key = validate_key(provider, secret)
		if not key:
			raise ValueError(f"{provider} API key looks like a placeholder or has an unexpected format")
		self._store.put(provider, key)
		self.invalidate(provider)
		return ProviderCredential(provider=provider, secret=key, source="store")

	def deactivate(self, provider: str) -> bool:
		if self._store is None:
			return False
		changed = self._store.deactivate(provider)
		self.invalidate(provider)
		return changed

	def record_usage(self, credential: ProviderCredential) -> None:
		if credential.source != "store" or self._store is None:
			return
		try:
			self._store.increment_usage(credential.provider)
		except Exception:
			logger.exception("Failed to increment usage for %s", credential.provider)

	def status(self, providers) -> Dict[str, Dict[str, object]]:
		report: Dict[str, Dict[str, object]] = {}
		for provider in providers:
			credential = self.resolve(provider)
			report[provider] = {
				"available": credential is not None,
				"source": credential.source if credential else None,
			}
		return report
