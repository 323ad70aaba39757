from __future__ import annotations
from typing import Optional


class GenerationError(Exception):
	"""Base class for failures of a single generation call."""

	kind = "generation_error"

	def __init__(self, message: str, *, provider: Optional[str] = None) -> None:
		super().__init__(message)
		self.message = message
		self.provider = provider


class UnsupportedProviderError(GenerationError):
	kind = "unsupported_provider"

	def __init__(self, provider: str) -> None:
		super().__init__(f"unsupported AI provider: {provider}", provider=provider)


class ProviderTransportError(GenerationError):
	"""Network failure, timeout, or non-2xx status from the vendor."""

	kind = "transport_error"

	def __init__(self, message: str, *, provider: str, status_code: Optional[int] = None) -> None:
		super().__init__(message, provider=provider)
		self.status_code = status_code


class MalformedResponseError(GenerationError):
	"""Vendor answered 2xx but nothing usable could be recovered from the body."""

	kind = "malformed_response"

	def __init__(self, message: str, *, provider: Optional[str] = None, excerpt: str = "") -> None:
		super().__init__(message, provider=provider)
		self.excerpt = excerpt


class CredentialDecryptError(Exception):
	pass
