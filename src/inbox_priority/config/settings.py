from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from inbox_priority.config.paths import SECRETS_DIR


DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str]
    openai_model: str
    todoist_api_token: Optional[str]
    # Where the dashboard client finds the backend API.
    api_base_url: str
    max_results: int = 50


def _load_openai_api_key(secrets_dir: Path) -> str | None:
    env_value = (os.getenv("OPENAI_API_KEY") or "").strip()
    if env_value:
        return env_value

    txt_path = secrets_dir / "openai_token.txt"
    if txt_path.exists():
        try:
            token = txt_path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            return None
        return token or None

    json_path = secrets_dir / "openai_token.json"
    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        # Prefer explicit key names, then generic token key.
        candidates = [
            payload.get("api_key"),
            payload.get("openai_api_key"),
            payload.get("token"),
        ]
        for candidate in candidates:
            if isinstance(candidate, str):
                token = candidate.strip()
                if token:
                    return token
        return None

    return None


def load_settings(secrets_dir: Path = SECRETS_DIR) -> Settings:
    return Settings(
        openai_api_key=_load_openai_api_key(secrets_dir),
        openai_model=os.getenv("INBOX_PRIORITY_MODEL", DEFAULT_MODEL),
        todoist_api_token=(os.getenv("TODOIST_API_TOKEN") or "").strip() or None,
        api_base_url=os.getenv("INBOX_PRIORITY_API_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        max_results=int(os.getenv("INBOX_PRIORITY_MAX_RESULTS", "50")),
    )
