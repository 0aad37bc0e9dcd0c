import logging
import uuid
from collections.abc import Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from petshop.cache import close_redis
from petshop.db.connection import dispose_engine, get_engine
from petshop.settings import AppSettings, get_settings
from petshop.warmup import warmup_all

from .api import cart, favorites
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.errors import ShopError
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
)
from .utils.request_context import clear_request_id, get_request_id, set_request_id

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_LOCAL_DEV_ORIGINS = tuple(
    f"http://{host}:{port}"
    for host in ("localhost", "127.0.0.1")
    for port in (*range(3000, 3011), 5173)
)


def _validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log one warning per optional setting left unconfigured."""
    for warning in (active_settings or get_settings()).optional_config_warnings():
        logger.warning("Configuration: %s", warning)


def _sanitize_database_url(url: str) -> str:
    """Return ``url`` with any password masked, for logging."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url


def _cors_origins(extra: Iterable[str]) -> list[str]:
    """Local development origins followed by ``extra``, without duplicates."""
    merged = (origin.rstrip("/") for origin in (*_LOCAL_DEV_ORIGINS, *extra))
    return list(dict.fromkeys(origin for origin in merged if origin))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm up connections on startup and release them on shutdown."""
    _validate_environment()
    logger.info(
        "Starting Pet Shop API on %s (%s)",
        settings.database_type,
        _sanitize_database_url(settings.resolved_database_url),
    )

    await warmup_all(resolve_engine=get_engine)

    yield

    logger.info("Shutting down Pet Shop API")
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="Pet Shop API",
    version="0.1.0",
    description="Per-user shopping cart and favorites for the pet shop storefront.",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(settings.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag the request with an id, reusing one supplied by an upstream proxy."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


def _json_error(payload: BaseModel, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render body, query and header validation failures as a 422."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(part) for part in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]
    logger.info(
        "Rejected request %s to %s: %d invalid field(s)",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    payload = build_validation_error_response(
        errors=errors,
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=request.url.path,
    )
    return _json_error(payload, status.HTTP_422_UNPROCESSABLE_ENTITY)


@app.exception_handler(ShopError)
async def shop_exception_handler(request: Request, exc: ShopError):
    """Render every cart/favorites domain error with its mapped status."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "%s for request %s to %s: %s",
        type(exc).__name__,
        get_request_id(),
        request.url.path,
        exc.detail,
    )
    payload = build_error_response(
        error_type=exc.error_type,
        message=exc.message,
        detail=exc.detail,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _json_error(payload, exc.status_code)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Last-resort 500; the traceback goes to the log, never to the client."""
    logger.exception(
        "Unhandled %s for request %s to %s",
        type(exc).__name__,
        get_request_id(),
        request.url.path,
    )
    payload = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"Unexpected {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=request.url.path,
    )
    return _json_error(payload, status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(cart.router, prefix="/api/v1", tags=["cart"])
app.include_router(favorites.router, prefix="/api/v1", tags=["favorites"])
