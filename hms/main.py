import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from hms.api.v1.router import api_router
from hms.core.config import Settings, get_settings
from hms.core.errors import register_exception_handlers
from hms.core.security import decode_token
from hms.core.services import AppServices
from hms.core.tenant_context import Principal
from hms.services.audit_service import AUDIT_SKIP_PATHS, MUTATING_METHODS, client_ip

logger = logging.getLogger(__name__)


def _principal_from_header(settings: Settings, authorization: str | None) -> Principal | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    try:
        return Principal.from_claims(decode_token(settings, authorization[7:].strip()))
    except (ValueError, KeyError):
        return None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = AppServices.build(settings)
        app.state.services = services
        logger.info("Started %s (env=%s)", settings.project_name, settings.app_env)
        try:
            yield
        finally:
            await services.shutdown()

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.middleware("http")
    async def audit_api_requests(request: Request, call_next):
        """
        Coarse API_REQUEST entry for every authenticated mutating call,
        on top of the per-operation entries the endpoints write.
        """
        response = await call_next(request)

        path = request.url.path
        if request.method not in MUTATING_METHODS or path.endswith(AUDIT_SKIP_PATHS):
            return response

        principal = _principal_from_header(settings, request.headers.get("authorization"))
        if principal is None:
            return response

        await run_in_threadpool(
            request.app.state.services.audit.record,
            action="API_REQUEST",
            entity="API",
            details={
                "method": request.method,
                "path": path,
                "query": dict(request.query_params),
                "statusCode": response.status_code,
            },
            user_id=principal.user_id,
            hospital_id=principal.hospital_id,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        return response

    @app.get("/health", tags=["health"])
    async def root_health() -> dict:
        """
        Global health check endpoint.
        """
        return {"status": "ok"}

    # Mount versioned API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_app()
