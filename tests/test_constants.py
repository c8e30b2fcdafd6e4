from __future__ import annotations

import importlib

from exam_notes.constants import network_constants


def test_network_defaults_bind_locally(monkeypatch):
    for name in ("EXAM_NOTES_HOST", "EXAM_NOTES_PORT", "EXAM_NOTES_ALLOWED_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    defaults = importlib.reload(network_constants)

    assert defaults.DEFAULT_HOST == "127.0.0.1"
    assert defaults.DEFAULT_PORT == 8000
    assert defaults.ALLOWED_ORIGINS == ["*"]


def test_network_settings_follow_environment(monkeypatch):
    monkeypatch.setenv("EXAM_NOTES_HOST", "0.0.0.0")
    monkeypatch.setenv("EXAM_NOTES_ALLOWED_ORIGINS", "http://a.test, http://b.test")

    overridden = importlib.reload(network_constants)

    assert overridden.DEFAULT_HOST == "0.0.0.0"
    assert overridden.ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]
    monkeypatch.undo()
    importlib.reload(network_constants)
