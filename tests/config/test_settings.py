from __future__ import annotations

import json

from inbox_priority.config.settings import load_settings


def test_env_key_wins(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", " sk-env ")
    (tmp_path / "openai_token.txt").write_text("sk-file", encoding="utf-8")

    assert load_settings(tmp_path).openai_api_key == "sk-env"


def test_key_falls_back_to_json_file(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    (tmp_path / "openai_token.json").write_text(json.dumps({"token": "sk-json"}), encoding="utf-8")

    assert load_settings(tmp_path).openai_api_key == "sk-json"


def test_defaults(tmp_path, monkeypatch) -> None:
    for name in ("OPENAI_API_KEY", "TODOIST_API_TOKEN", "INBOX_PRIORITY_API_URL", "INBOX_PRIORITY_MAX_RESULTS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INBOX_PRIORITY_API_URL", "http://localhost:9000/")

    settings = load_settings(tmp_path)

    assert settings.openai_api_key is None
    assert settings.todoist_api_token is None
    assert settings.api_base_url == "http://localhost:9000"
    assert settings.max_results == 50
