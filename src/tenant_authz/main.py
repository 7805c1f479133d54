import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tenant_authz.authz.engine import AuthorizationEngine
from tenant_authz.configs.logging_config import get_logger, setup_logging
from tenant_authz.configs.settings import Settings, get_settings, split_csv
from tenant_authz.domain.entities.policy import PolicyDocument
from tenant_authz.errors import AppError
from tenant_authz.policy.loader import build_engine, load_document
from tenant_authz.repositories.mongo import get_mongo_client, get_mongo_db
from tenant_authz.repositories.policy_repository import PolicyRepository
from tenant_authz.routers.authz_router import router as authz_router
from tenant_authz.routers.health_router import router as health_router
from tenant_authz.utils.response import failure

log = get_logger(__name__)


async def _load_policy_document(settings: Settings) -> PolicyDocument:
    if settings.POLICY_SOURCE.lower() != "mongo":
        return load_document(settings)

    mongo_client = get_mongo_client(settings)
    try:
        repo = PolicyRepository(get_mongo_db(mongo_client, settings), settings)
        return await repo.load()
    finally:
        # policy is read once; no connection is kept for request handling
        mongo_client.close()


def create_app(
    settings: Settings | None = None,
    engine: AuthorizationEngine | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.SERVICE_NAME, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        request_id = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")

        log.info("request.start method=%s path=%s request_id=%s", method, path, request_id)
        status_code = "unknown"
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            log.info(
                "request.end method=%s path=%s status=%s request_id=%s elapsed_ms=%s",
                method,
                path,
                status_code,
                request_id,
                elapsed_ms,
            )
        return response

    app.include_router(health_router)
    app.include_router(authz_router)

    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
        log.info("request.error type=app_error status=%s message=%s", exc.http_status, exc.message)
        return JSONResponse(status_code=exc.http_status, content=failure(exc.message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error: %s", str(exc))
        return JSONResponse(status_code=500, content=failure("internal server error"))

    @app.on_event("startup")
    async def startup() -> None:
        setup_logging(settings.LOG_LEVEL)
        log.info("startup.begin service=%s environment=%s", settings.SERVICE_NAME, settings.ENVIRONMENT)
        app.state.settings = settings

        if engine is not None:
            app.state.engine = engine
            log.info("startup.policy injected")
            return

        log.info("startup.policy.load source=%s", settings.POLICY_SOURCE)
        document = await _load_policy_document(settings)
        # PolicyConfigError propagates and aborts startup
        app.state.engine = build_engine(settings, document)
        log.info(
            "startup.policy.ready superuser_role=%s tenant_admin_role=%s",
            settings.SUPERUSER_ROLE,
            settings.TENANT_ADMIN_ROLE,
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:
        log.info("shutdown.done")

    return app


app = create_app()
