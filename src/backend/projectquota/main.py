"""Project quota admission webhook application factory.

Entry point: uvicorn projectquota.main:app --ssl-keyfile ... --ssl-certfile ...
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from projectquota.config import settings
from projectquota.errors import QuotaWebhookError
from projectquota.kube import load_custom_objects_api
from projectquota.logging_config import configure_logging
from projectquota.middleware import RequestIDMiddleware, get_request_id
from projectquota.repositories.project_quota_repo import ProjectQuotaRepository
from projectquota.routers import admission, health
from projectquota.services.admission_service import AdmissionService
from projectquota.services.resolver import QuotaResolver


def build_state(app: FastAPI, repo: ProjectQuotaRepository) -> None:
    """Wire the long-lived repository, resolver and admission service onto app.state."""
    resolver = QuotaResolver(repo, cache_ttl_seconds=settings.RESOLVER_CACHE_TTL_SECONDS)
    app.state.project_quota_repo = repo
    app.state.admission_service = AdmissionService(
        resolver, repo, clear_stale_tags=settings.CLEAR_STALE_TAGS
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(settings.LOG_LEVEL)
    api = load_custom_objects_api()
    build_state(app, ProjectQuotaRepository(api))

    yield

    api.api_client.close()


app = FastAPI(title="ProjectQuota Webhook", lifespan=lifespan)

app.add_middleware(RequestIDMiddleware)


@app.exception_handler(QuotaWebhookError)
async def quota_webhook_error_handler(
    request: Request, exc: QuotaWebhookError
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "request_id": get_request_id(),
            }
        },
        headers={"X-Request-ID": get_request_id()},
    )


app.include_router(health.router)
app.include_router(admission.router)
