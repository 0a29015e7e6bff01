"""Shared pytest fixtures for receipt engine tests."""

from __future__ import annotations

import pytest

from receipt_engine.rates import TAX_TABLE_ENV_VAR


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's tax table override out of the tests."""
    monkeypatch.delenv(TAX_TABLE_ENV_VAR, raising=False)
    monkeypatch.delenv("RECEIPT_ENGINE_LOG_LEVEL", raising=False)
