import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio.backend.auth import AuthGate, PasswordLogin, ProviderGate, SharedSecretGate
from portfolio.backend.db.engine import create_engine, create_session_factory
from portfolio.backend.errors import describe_validation_errors
from portfolio.backend.identity import SupabaseIdentityProvider
from portfolio.backend.log import RequestLogMiddleware, setup_logging
from portfolio.backend.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from portfolio.backend.models.api import AdminStatus, ErrorResponse, SupabasePublicConfig
from portfolio.backend.settings import PortfolioSettings, get_settings
from portfolio.backend.store.base import ProjectStore
from portfolio.backend.store.local import FileProjectStore
from portfolio.backend.store.table import TableProjectStore

# ---------------------------------------------------------------------------
# Startup wiring: store and gate are chosen once from configuration
# ---------------------------------------------------------------------------


def _create_auth_gate(settings: PortfolioSettings) -> AuthGate:
    """Create the auth gate for the configured mode."""
    if settings.provider_configured:
        assert settings.supabase_url and settings.supabase_anon_key
        provider = SupabaseIdentityProvider(settings.supabase_url, settings.supabase_anon_key)
        return ProviderGate(provider, admin_email=settings.admin_email)

    token = settings.resolve_auth_token()
    if not settings.auth_token:
        logger.warning("No PORTFOLIO_AUTH_TOKEN set -- generated token (valid until restart): {}", token)
    return SharedSecretGate(token)


def _build_admin_status(settings: PortfolioSettings, gate: AuthGate) -> AdminStatus:
    supabase = None
    if settings.provider_configured:
        assert settings.supabase_url and settings.supabase_anon_key
        supabase = SupabasePublicConfig(url=settings.supabase_url, anon_key=settings.supabase_anon_key)
    return AdminStatus(auth_mode=gate.mode, store=settings.store_kind, supabase=supabase)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Portfolio backend starting (host={}, port={})", settings.host, settings.port)

    _app.state.db_engine = None
    _app.state.password_login = None
    _app.state.expose_errors = settings.is_development

    # -- Project store ---------------------------------------------------------
    store: ProjectStore
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        store = TableProjectStore(create_session_factory(engine))
        logger.info("Project store: table (database configured)")
    else:
        path = settings.resolve_projects_path()
        store = FileProjectStore(path)
        logger.info("Project store: file ({})", path)
    _app.state.project_store = store

    # -- Auth gate -------------------------------------------------------------
    gate = _create_auth_gate(settings)
    _app.state.auth_gate = gate
    if isinstance(gate, SharedSecretGate) and settings.admin_password is not None:
        _app.state.password_login = PasswordLogin(
            settings.admin_username, settings.admin_password.get_secret_value(), gate
        )
    _app.state.admin_status = _build_admin_status(settings, gate)
    logger.info("Auth mode: {}", gate.mode)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Portfolio backend shutting down")

    if isinstance(gate, ProviderGate):
        await gate.provider.aclose()

    # Dispose DB engine (closes all pooled connections).
    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("Database: disposed")


app = FastAPI(title="Portfolio Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
app.add_middleware(BodySizeLimitMiddleware, max_bytes=get_settings().max_body_bytes)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Error envelope: every failure is {"success": false, "message": ...}
# ---------------------------------------------------------------------------


def _error(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    error: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, error=error).model_dump(exclude_none=True)
    return JSONResponse(body, status_code=status_code, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {describe_validation_errors(exc.errors())}")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    detail = str(exc) if getattr(request.app.state, "expose_errors", False) else None
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error=detail)


# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, object]:
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


from portfolio.backend.routers.admin import router as admin_router  # noqa: E402
from portfolio.backend.routers.auth import router as auth_router  # noqa: E402
from portfolio.backend.routers.projects import router as projects_router  # noqa: E402

api.include_router(projects_router)
api.include_router(auth_router)
api.include_router(admin_router)

app.include_router(api)

# ---------------------------------------------------------------------------
# Static site serving
# Resolved relative to CWD.  Override with PORTFOLIO_SITE_DIR if needed.
# ---------------------------------------------------------------------------
_SITE_DIR = Path(os.getenv("PORTFOLIO_SITE_DIR", "site"))

if _SITE_DIR.is_dir():
    app.mount("/", StaticFiles(directory=_SITE_DIR, html=True), name="site")
