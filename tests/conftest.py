from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_aem_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("AEM_"):
            monkeypatch.delenv(name)
