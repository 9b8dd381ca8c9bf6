import sys
import logging
import time
import uuid
from datetime import datetime
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

sys.path.append(str(Path(__file__).parent.parent))

from services.cache import InMemoryCache
from services.income_fetcher import HistoricalSeriesFetcher
from services.settings import Settings
from services.transport import HttpxTransport, Transport


API_VERSION = "1.0.0"


class _DefaultRequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def _configure_logging() -> logging.Logger:
    repo_root = Path(__file__).resolve().parents[1]
    logs_dir = repo_root / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = logs_dir / f"backend_{timestamp}.log"

    logger = logging.getLogger("zipscope")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Avoid duplicate handlers (e.g. reload/test runner).
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] [request_id=%(request_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(_DefaultRequestIdFilter())

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(_DefaultRequestIdFilter())

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info("backend_start", extra={"request_id": "-"})
    logger.info("log_file=%s", str(log_path), extra={"request_id": "-"})
    return logger


def create_app(settings: Settings | None = None, transport: Transport | None = None) -> FastAPI:
    """Build the API. ``transport`` replaces the HTTP client (tests, offline runs)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = _configure_logging()
        app_settings = settings or Settings.from_env()
        owned_transport = None
        data_transport = transport
        if data_transport is None:
            owned_transport = HttpxTransport(app_settings.api_base_url, timeout_s=app_settings.http_timeout_s)
            data_transport = owned_transport

        app.state.settings = app_settings
        app.state.transport = data_transport
        app.state.fetcher = HistoricalSeriesFetcher(data_transport, config=app_settings.fetch_config())
        app.state.cache = InMemoryCache(
            max_items=app_settings.cache_max_items,
            default_ttl_s=app_settings.cache_ttl_s,
        )
        app.state.logger = logger

        try:
            yield
        finally:
            if owned_transport is not None:
                owned_transport.close()

    app = FastAPI(
        title="ZipScope API",
        description="Median income history and ranking per ZIP code",
        version=API_VERSION,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        logger: logging.Logger = request.app.state.logger
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_unhandled_exception method=%s path=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                duration_ms,
                extra={"request_id": request_id},
            )
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
            )

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            getattr(response, "status_code", None),
            duration_ms,
            extra={"request_id": request_id},
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:4200", "http://localhost:3000"],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.routes.zips import router as zips_router
    from api.routes.states import router as states_router

    app.include_router(zips_router)
    app.include_router(states_router)

    # Same routes under /api/*
    app.include_router(zips_router, prefix="/api", include_in_schema=False)
    app.include_router(states_router, prefix="/api", include_in_schema=False)

    @app.get("/")
    async def root():
        return {
            "message": "ZipScope API",
            "version": API_VERSION,
            "docs": "/docs",
            "status": "operational",
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        logger = logging.getLogger("zipscope")
        try:
            cache = request.app.state.cache
            fetcher = request.app.state.fetcher
            result = {
                "status": "healthy",
                "cache": "operational",
                "cache_size": len(cache),
                "fetcher": "operational" if fetcher is not None else "missing",
            }
            logger.info("health_ok", extra={"request_id": "-"})
            return result
        except Exception as e:
            logger.exception("health_failed", extra={"request_id": "-"})
            raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
