"""Health check endpoints for the project quota webhook.

Both endpoints are unauthenticated and used by Kubernetes liveness and
readiness probes.
"""

import importlib.metadata

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from projectquota.errors import QuotaWebhookError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the application process is running."""
    version = importlib.metadata.version("projectquota")
    return {"status": "ok", "version": version}


@router.get("/health/ready")
async def health_ready(request: Request) -> JSONResponse:
    """Readiness probe: returns 200 if ProjectResourceQuotas can be listed, 503 otherwise."""
    try:
        await request.app.state.project_quota_repo.list_all()
    except QuotaWebhookError as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "detail": exc.message},
        )
    return JSONResponse(status_code=200, content={"status": "ok"})
