from __future__ import annotations

import os

import pytest


_SETTINGS_ENV_PREFIX = "NUMBERBLOCKS_"


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Settings tests set their own NUMBERBLOCKS_* values.
    for name in list(os.environ):
        if name.startswith(_SETTINGS_ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
