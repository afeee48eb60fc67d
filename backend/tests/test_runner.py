"""
Tests for the ``python -m unit_booking`` entry point.
"""
import importlib

from unit_booking.config import settings


def test_run_serves_app_on_configured_port(monkeypatch):
    runner = importlib.import_module("unit_booking.__main__")
    calls = []
    monkeypatch.setattr(runner.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr(settings, "PORT", 8123)

    runner.run()

    assert calls == [(("unit_booking.main:app",), {"host": settings.HOST, "port": 8123})]
