from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from .credentials import CredentialResolver
from .db import SessionLocal
from .dispatcher import ContentDispatcher
from .encryption import KeyCipher
from .key_store import SqlCredentialStore
from .providers import ProviderRegistry, build_registry
from .settings import Settings, settings


@dataclass
class Services:
	registry: ProviderRegistry
	key_store: SqlCredentialStore
	resolver: CredentialResolver
	dispatcher: ContentDispatcher


def build_services(cfg: Optional[Settings] = None, *, client: Optional[httpx.AsyncClient] = None) -> Services:
	cfg = cfg or settings
	registry = build_registry(cfg)
	key_store = SqlCredentialStore(SessionLocal, KeyCipher(cfg.encryption_key))
	resolver = CredentialResolver(
		cfg.env_api_keys(),
		key_store,
		ttl_seconds=cfg.credential_cache_seconds,
	)
	dispatcher = ContentDispatcher(
		registry,
		resolver,
		client=client,
		timeout_seconds=cfg.request_timeout_seconds,
	)
	return Services(registry=registry, key_store=key_store, resolver=resolver, dispatcher=dispatcher)


def get_services(request: Request) -> Services:
	return request.app.state.services


def get_dispatcher(request: Request) -> ContentDispatcher:
	return request.app.state.services.dispatcher
