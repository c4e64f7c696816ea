"""Preflight checks that run before any network activity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import ErrorCode, create_error, invalid_parameters
from .locales import locale_matches, validate_locale

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True, slots=True)
class ComponentOperation:
    locale: str
    page_path: str
    component: str
    props: Mapping[str, Any]


def is_valid_content_path(path: object, roots: Iterable[str]) -> bool:
    if not isinstance(path, str) or not path.startswith("/"):
        return False
    if ".." in path.split("/"):
        return False
    for root in roots:
        stripped = root.rstrip("/")
        if path == stripped or path.startswith(f"{stripped}/"):
            return True
    return False


def require_path(path: object, field_name: str) -> str:
    if not isinstance(path, str) or not path.strip():
        raise invalid_parameters(
            f"{field_name} is required and must be a string", **{field_name: path}
        )
    return path


def require_content_path(path: object, roots: Iterable[str], *, field_name: str = "path") -> str:
    """Require ``path`` and that it sits under one of the configured content roots."""

    value = require_path(path, field_name)
    root_list = tuple(roots)
    if not is_valid_content_path(value, root_list):
        raise create_error(
            ErrorCode.INVALID_PATH,
            f"Path '{value}' is not within allowed content roots",
            {"path": value, "allowedRoots": list(root_list)},
        )
    return value


def require_mapping(value: object, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise invalid_parameters(
            f"{field_name} are required and must be an object", **{field_name: value}
        )
    return value


def is_valid_component_type(component: object, allowed: Iterable[str]) -> bool:
    return isinstance(component, str) and component in set(allowed)


def validate_component_operation(
    *,
    locale: object,
    page_path: object,
    component: object,
    props: object,
    roots: Iterable[str],
    allowed_components: Iterable[str],
    allowed_locales: tuple[str, ...],
) -> ComponentOperation:
    if not locale or not page_path or not component or props is None:
        raise create_error(
            ErrorCode.INVALID_PARAMETERS,
            "locale, pagePath, component and props are all required",
            {
                "locale": locale,
                "pagePath": page_path,
                "component": component,
                "hasProps": props is not None,
            },
        )
    token = validate_locale(locale)
    if not locale_matches(token, allowed_locales):
        raise create_error(
            ErrorCode.INVALID_LOCALE,
            f"Locale '{token}' is not supported",
            {"locale": token, "allowedLocales": list(allowed_locales)},
        )
    path = require_content_path(page_path, roots, field_name="pagePath")
    allowed = tuple(allowed_components)
    if not is_valid_component_type(component, allowed):
        raise create_error(
            ErrorCode.INVALID_COMPONENT_TYPE,
            f"Component type '{component}' is not allowed",
            {"component": component, "allowedTypes": list(allowed)},
        )
    return ComponentOperation(
        locale=token,
        page_path=path,
        component=str(component),
        props=require_mapping(props, "props"),
    )
