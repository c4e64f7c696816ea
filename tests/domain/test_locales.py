from __future__ import annotations

import pytest

from aemops.domain.errors import ClassifiedError, ErrorCode
from aemops.domain.locales import is_valid_locale, locale_matches, normalize_locale


@pytest.mark.parametrize("token", ["en", "EN", "en-US", "en_us", "fr_FR"])
def test_valid_locales(token: str) -> None:
    assert is_valid_locale(token)


@pytest.mark.parametrize("token", ["", "e", "eng", "en-USA", "en US", "12", None, 7])
def test_invalid_locales(token: object) -> None:
    assert not is_valid_locale(token)


def test_normalize_locale_is_idempotent() -> None:
    once = normalize_locale("en-US")

    assert once == "en_us"
    assert normalize_locale(once) == once


def test_normalize_locale_rejects_bad_tokens() -> None:
    with pytest.raises(ClassifiedError) as excinfo:
        normalize_locale("english")

    assert excinfo.value.code is ErrorCode.INVALID_LOCALE
    assert excinfo.value.recoverable is False


def test_locale_matches_prefix_and_exact() -> None:
    allowed = ("en_us", "de-DE")

    assert locale_matches("en", allowed)
    assert locale_matches("EN-us", allowed)
    assert locale_matches("de_de", allowed)
    assert not locale_matches("fr", allowed)
    assert not locale_matches("en_gb", allowed)
