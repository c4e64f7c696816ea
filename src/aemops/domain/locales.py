"""Locale token validation and normalisation."""

from __future__ import annotations

import re
from typing import Final

from .errors import ErrorCode, create_error

LOCALE_PATTERN: Final = re.compile(r"^[a-z]{2}(?:[-_][a-z]{2})?$", re.IGNORECASE)


def is_valid_locale(token: object) -> bool:
    return isinstance(token, str) and LOCALE_PATTERN.fullmatch(token) is not None


def validate_locale(token: object) -> str:
    if not isinstance(token, str) or not token:
        raise create_error(
            ErrorCode.INVALID_LOCALE,
            "Locale must be a non-empty string",
            {"locale": token},
        )
    if LOCALE_PATTERN.fullmatch(token) is None:
        raise create_error(
            ErrorCode.INVALID_LOCALE,
            "Invalid locale format. Expected format: en, en-US, en_US",
            {"locale": token},
        )
    return token


def normalize_locale(token: str) -> str:
    """``en-US`` -> ``en_us``. Applying it to its own output is a no-op."""

    return validate_locale(token).lower().replace("-", "_")


def locale_matches(token: str, allowed: tuple[str, ...] | list[str]) -> bool:
    """True when ``token`` is allowed; bare ``en`` also matches any ``en_*`` entry."""

    normalized = normalize_locale(token)
    for candidate in allowed:
        if not is_valid_locale(candidate):
            continue
        allowed_normalized = normalize_locale(candidate)
        if allowed_normalized == normalized:
            return True
        if "_" not in normalized and allowed_normalized.startswith(f"{normalized}_"):
            return True
    return False
