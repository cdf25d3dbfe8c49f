from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse
from google_auth_oauthlib.flow import InstalledAppFlow

from inbox_priority.app.inbox import load_gmail_config
from inbox_priority.config.paths import CREDENTIALS_PATH, SECRETS_DIR, TOKEN_PATH
from inbox_priority.gmail.client import SCOPES

logger = logging.getLogger(__name__)

router = APIRouter()

# Pending sign-ins keyed by OAuth state; lost on restart, then rebuilt from state.
_pending_flows: dict[str, InstalledAppFlow] = {}


def _new_flow(request: Request, state: Optional[str] = None) -> InstalledAppFlow:
    try:
        cfg = load_gmail_config()
    except RuntimeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    flow = InstalledAppFlow.from_client_secrets_file(str(cfg.credentials_path), SCOPES, state=state)
    flow.redirect_uri = str(request.url_for("oauth_callback"))
    return flow


@router.get("/secrets/status")
def secrets_status() -> dict:
    return {
        "ok": True,
        "secrets_dir": str(SECRETS_DIR),
        "credentials_present": CREDENTIALS_PATH.exists(),
        "signed_in": TOKEN_PATH.exists(),
    }


@router.post("/secrets/credentials")
def upload_credentials(file: UploadFile = File(...)) -> dict:
    if not (file.filename or "").endswith(".json"):
        raise HTTPException(status_code=400, detail="Upload the OAuth client JSON file.")

    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload.")

    CREDENTIALS_PATH.write_bytes(content)
    logger.info("Stored OAuth client credentials at %s", CREDENTIALS_PATH)
    return {"ok": True}


@router.post("/secrets/oauth")
def start_oauth(request: Request) -> dict:
    flow = _new_flow(request)
    # Offline access plus consent so Google hands out a refresh token every time.
    auth_url, state = flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="consent",
    )
    _pending_flows[state] = flow
    logger.info("Started Gmail sign-in")
    return {"ok": True, "auth_url": auth_url}


@router.get("/secrets/oauth/callback", name="oauth_callback")
def oauth_callback(request: Request, state: str, code: str) -> HTMLResponse:
    flow = _pending_flows.pop(state, None) or _new_flow(request, state=state)
    try:
        flow.fetch_token(code=code)
    except Exception as exc:
        logger.error("Gmail sign-in failed: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    TOKEN_PATH.write_text(flow.credentials.to_json(), encoding="utf-8")
    logger.info("Gmail sign-in completed")
    return HTMLResponse("<h2>Signed in</h2><p>You can close this window and return to your inbox.</p>")


@router.post("/secrets/signout")
def sign_out() -> dict:
    TOKEN_PATH.unlink(missing_ok=True)
    logger.info("Signed out of Gmail")
    return {"ok": True, "signed_in": False}
