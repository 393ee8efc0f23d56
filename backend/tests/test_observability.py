"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib

from weekplan.observability import client as client_module


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import weekplan.main as main_module

    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")


def test_opik_stays_disabled_without_api_key(monkeypatch) -> None:
    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", None)
    client_module.reset_opik_client()

    try:
        assert client_module.get_opik_client() is None
    finally:
        client_module.reset_opik_client()
