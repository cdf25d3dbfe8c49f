# backend/app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.emails import router as emails_router
from backend.app.api.secrets import router as secrets_router
from backend.app.api.tasks import router as tasks_router
from inbox_priority.errors import AuthRequiredError
from inbox_priority.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="inbox-priority API")
app.include_router(emails_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(secrets_router, prefix="/api")


@app.exception_handler(AuthRequiredError)
def auth_required(_request: Request, exc: AuthRequiredError) -> JSONResponse:
    # Signed out or token revoked; the dashboard sends the user to /api/secrets/oauth.
    logger.info("Unauthorized request: %s", exc)
    return JSONResponse({"error": "Unauthorized"}, status_code=401)
