from __future__ import annotations

import pytest

from aemops.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_bool,
    env_int,
    env_list,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "three")

    with pytest.raises(ConfigurationError):
        env_int("EXAMPLE_INT", 1)


@pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("0", False), ("", True)])
def test_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_bool("EXAMPLE_FLAG", default=True) is expected


def test_env_list_drops_blank_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_LIST", "en, de ,,fr_fr")

    assert env_list("EXAMPLE_LIST", ()) == ("en", "de", "fr_fr")
    monkeypatch.delenv("EXAMPLE_LIST")
    assert env_list("EXAMPLE_LIST", ["x"]) == ("x",)
