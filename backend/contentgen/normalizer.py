from __future__ import annotations
import json
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedResponseError
from .schemas import Content, StructuredContent, TextContent


# Rough characters-per-token ratio for Korean text
KOREAN_CHARS_PER_TOKEN = 2.5

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_CLOSERS = {"{": "}", "[": "]"}


def estimate_tokens(text: str) -> int:
	return int(math.ceil(len(text or "") / KOREAN_CHARS_PER_TOKEN))


def _balanced_span(text: str, start: int) -> Tuple[Optional[str], bool]:
	"""Bracket-balanced substring opening at ``start``, string-aware.

	The second item is False when the text ends before the opener is closed.
	"""
	stack: List[str] = []
	in_string = False
	escaped = False
	for i in range(start, len(text)):
		ch = text[i]
		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch == '"':
			in_string = True
		elif ch in _CLOSERS:
			stack.append(_CLOSERS[ch])
		elif ch in ("}", "]"):
			if not stack or stack.pop() != ch:
				return None, True
			if not stack:
				return text[start : i + 1], True
	return None, False


def extract_json(text: str) -> Tuple[bool, Any]:
	"""Best-effort JSON recovery. Returns ``(found, value)``."""
	stripped = text.strip()
	try:
		return True, json.loads(stripped)
	except ValueError:
		pass
	code_block = _CODE_BLOCK_RE.search(stripped)
	if code_block:
		try:
			return True, json.loads(code_block.group(1))
		except ValueError:
			pass
	for i, ch in enumerate(stripped):
		if ch not in _CLOSERS:
			continue
		candidate, closed = _balanced_span(stripped, i)
		if not closed:
			# Truncated reply: anything after this opener is a nested fragment
			break
		if candidate is None:
			continue
		try:
			value = json.loads(candidate)
		except ValueError:
			continue
		# Empty brackets inside prose are not the payload we asked for
		if isinstance(value, (dict, list)) and value:
			return True, value
	return False, None


def structure_from_prose(text: str) -> Dict[str, Any]:
	lines = [line.strip() for line in text.splitlines() if line.strip()]
	rest = lines[6:]
	return {
		"title": lines[0] if lines else "한국어 학습 자료",
		"description": "AI가 생성한 학습 자료입니다.",
		"mainContent": {
			"introduction": " ".join(lines[1:3]),
			"keyPoints": lines[3:6],
			"examples": [],
		},
		"exercises": [],
		"additionalNotes": rest,
		"notes": rest,
	}


def normalize_reply(text: Optional[str], *, provider: Optional[str] = None) -> Content:
	if text is None or not text.strip():
		raise MalformedResponseError("empty reply from provider", provider=provider, excerpt=(text or "")[:200])
	found, value = extract_json(text)
	if found:
		if isinstance(value, str):
			return TextContent(value)
		return StructuredContent(value)
	return StructuredContent(structure_from_prose(text), recovered=True)
