"""Credential scrubbing for log lines, error text and journal payloads.

OpenWeatherMap authenticates with an ``appid`` query parameter, so the key
leaks anywhere a request URL is echoed back: httpx transport errors, debug
logs and raw payload dumps. Text is scrubbed two ways: ``name=value`` pairs
whose name looks like a credential, and exact values registered at startup.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

SENSITIVE_NAMES = frozenset({"appid", "api_key", "apikey", "authorization", "token", "secret"})

_PAIR_RE = re.compile(
    r"""(?ix)
    \b(appid|api[_-]?key|authorization|token|secret)
    \s*[:=]\s*
    (?:bearer\s+)?
    [^\s,;&"']+
    """
)
# Shorter values would match ordinary words.
_MIN_REGISTERED_LENGTH = 6

_registered_secrets: set[str] = set()


def register_secret(value: str) -> None:
    """Scrub this exact value from all later sanitized text."""
    value = value.strip()
    if len(value) >= _MIN_REGISTERED_LENGTH:
        _registered_secrets.add(value)


def clear_registered_secrets() -> None:
    _registered_secrets.clear()


def is_sensitive_name(name: Any) -> bool:
    return str(name).strip().lower().replace("-", "_") in SENSITIVE_NAMES


def sanitize_text(text: str) -> str:
    """Redact credentials embedded in free text such as URLs or error messages."""
    for secret in _registered_secrets:
        text = text.replace(secret, REDACTED)
    return _PAIR_RE.sub(lambda match: f"{match.group(1)}={REDACTED}", text)


def sanitize_for_logging(value: Any) -> Any:
    """Return a copy of ``value`` with credential keys and embedded secrets redacted."""
    if isinstance(value, dict):
        return {
            key: REDACTED if is_sensitive_name(key) else sanitize_for_logging(child)
            for key, child in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_for_logging(item) for item in value)
    if isinstance(value, str):
        return sanitize_text(value)
    return value
