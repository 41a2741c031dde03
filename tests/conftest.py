"""Shared test fixtures.

Every test starts from a clean configuration: ``PORTFOLIO_*`` variables from
the outer environment are removed and the settings cache is cleared, so a
developer's ``.env`` exports never leak into assertions.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from portfolio.backend.settings import _get_settings_cached


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("PORTFOLIO_"):
            monkeypatch.delenv(key)
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()
