from __future__ import annotations

from fastapi import APIRouter

from formrelay.config import settings
from formrelay.version import APP_VERSION


router = APIRouter()


@router.get("/")
def root() -> dict[str, str]:
    return {"service": "formrelay-backend", "status": "running"}


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "environment": settings.app_env}


@router.get("/ready")
def ready() -> dict[str, object]:
    # Missing sink configuration never blocks readiness; the sink is skipped.
    return {
        "status": "ready",
        "environment": settings.app_env,
        "version": APP_VERSION,
        "checks": {
            "form_host": settings.form_host,
            "answer_source": settings.answer_source,
            "slack": {"configured": settings.slack_config() is not None},
            "jira": {"configured": settings.jira_config() is not None},
            "form_schema": {"configured": bool(settings.form_api_key.strip())},
        },
    }
