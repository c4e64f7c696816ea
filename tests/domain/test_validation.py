from __future__ import annotations

import pytest

from aemops.domain.errors import ClassifiedError, ErrorCode
from aemops.domain.validation import (
    ComponentOperation,
    is_valid_content_path,
    require_content_path,
    validate_component_operation,
)

ROOTS = ("/content", "/content/dam", "/conf")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/content/site/en", True),
        ("/content", True),
        ("/conf/site/templates/page", True),
        ("/contentious/page", False),
        ("/apps/site", False),
        ("content/site", False),
        ("/content/site/../../apps", False),
        (None, False),
    ],
)
def test_is_valid_content_path(path: object, expected: bool) -> None:
    assert is_valid_content_path(path, ROOTS) is expected


def test_require_content_path_distinguishes_missing_from_outside() -> None:
    with pytest.raises(ClassifiedError) as missing:
        require_content_path("", ROOTS, field_name="pagePath")
    with pytest.raises(ClassifiedError) as outside:
        require_content_path("/etc/passwd", ROOTS, field_name="pagePath")

    assert missing.value.code is ErrorCode.INVALID_PARAMETERS
    assert outside.value.code is ErrorCode.INVALID_PATH
    assert outside.value.details["allowedRoots"] == list(ROOTS)


def _validate(**overrides: object) -> ComponentOperation:
    values: dict[str, object] = {
        "locale": "en",
        "page_path": "/content/site/en/home",
        "component": "text",
        "props": {"text": "hi"},
    }
    values.update(overrides)
    return validate_component_operation(
        **values,
        roots=ROOTS,
        allowed_components=("text", "image"),
        allowed_locales=("en", "de"),
    )


def test_validate_component_operation_returns_checked_request() -> None:
    request = _validate(locale="DE")

    assert request.locale == "DE"
    assert request.page_path == "/content/site/en/home"


@pytest.mark.parametrize(
    ("overrides", "code"),
    [
        ({"props": None}, ErrorCode.INVALID_PARAMETERS),
        ({"locale": "xx-YY-ZZ"}, ErrorCode.INVALID_LOCALE),
        ({"locale": "fr"}, ErrorCode.INVALID_LOCALE),
        ({"page_path": "/apps/x"}, ErrorCode.INVALID_PATH),
        ({"component": "video"}, ErrorCode.INVALID_COMPONENT_TYPE),
        ({"props": ["not", "a", "map"]}, ErrorCode.INVALID_PARAMETERS),
    ],
)
def test_validate_component_operation_rejections(
    overrides: dict[str, object], code: ErrorCode
) -> None:
    with pytest.raises(ClassifiedError) as excinfo:
        _validate(**overrides)

    assert excinfo.value.code is code
