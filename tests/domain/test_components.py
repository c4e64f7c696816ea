from __future__ import annotations

import asyncio

import pytest

from aemops.domain.components import ComponentService, validate_component_props
from aemops.domain.errors import ClassifiedError, ErrorCode
from aemops.domain.outcome import TransportError
from tests.support.fakes import FakeAemGateway, FakeClock, ok, server_error

ROOTS = ("/content",)
COMPONENT = "/content/site/en/home/jcr:content/root/text"


def _service(gateway: FakeAemGateway) -> ComponentService:
    return ComponentService(
        gateway=gateway,
        content_roots=ROOTS,
        allowed_components=("text", "image"),
        allowed_locales=("en",),
        clock=FakeClock(),
    )


def test_update_component_probes_writes_and_verifies() -> None:
    gateway = FakeAemGateway(
        nodes={COMPONENT: [ok({"text": "old"}), ok({"text": "new"})]},
    )

    result = asyncio.run(_service(gateway).update_component(COMPONENT, {"text": "new"}))

    assert [call[0] for call in gateway.calls] == ["read_node", "post_properties", "read_node"]
    assert gateway.calls_to("post_properties") == [("post_properties", COMPONENT, {"text": "new"})]
    assert result.updated_properties == {"text": "new"}
    assert result.verification.properties_changed == 1
    assert result.verification.timestamp == FakeClock().now().isoformat()


def test_update_component_missing_target_is_component_not_found() -> None:
    gateway = FakeAemGateway()

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(_service(gateway).update_component(COMPONENT, {"text": "x"}))

    assert excinfo.value.code is ErrorCode.COMPONENT_NOT_FOUND
    assert gateway.calls_to("post_properties") == []


def test_update_component_surfaces_other_probe_failures() -> None:
    gateway = FakeAemGateway(nodes={COMPONENT: server_error()})

    with pytest.raises(TransportError):
        asyncio.run(_service(gateway).update_component(COMPONENT, {"text": "x"}))


def test_update_component_rejects_paths_outside_roots_before_any_call() -> None:
    gateway = FakeAemGateway()

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(_service(gateway).update_component("/apps/site/x", {"text": "x"}))

    assert excinfo.value.code is ErrorCode.INVALID_PATH
    assert gateway.calls == []


def test_validate_component_props_rules() -> None:
    text = validate_component_props("text", {})
    image = validate_component_props("image", {"alt": "x"})
    good_image = validate_component_props("image", {"fileReference": "/content/dam/a.png"})

    assert text.valid is True
    assert text.warnings
    assert image.valid is False
    assert image.errors == ["Image component requires fileReference or src property"]
    assert good_image.valid is True
    assert good_image.props_validated == 1


def test_validate_component_reads_page_and_reports() -> None:
    page = "/content/site/en/home"
    gateway = FakeAemGateway(nodes={page: ok({"jcr:content": {"jcr:title": "Home"}})})

    report = asyncio.run(
        _service(gateway).validate_component(
            locale="en", page_path=page, component="image", props={"src": "/a.png"}
        )
    )

    assert gateway.calls == [("read_node", page, 2)]
    assert report.validation.valid is True
    assert report.page_data == {"jcr:content": {"jcr:title": "Home"}}
    assert report.allowed_components == ["text", "image"]


def test_validate_component_rejects_disallowed_type_without_calls() -> None:
    gateway = FakeAemGateway()

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(
            _service(gateway).validate_component(
                locale="en", page_path="/content/site/en", component="video", props={}
            )
        )

    assert excinfo.value.code is ErrorCode.INVALID_COMPONENT_TYPE
    assert gateway.calls == []
