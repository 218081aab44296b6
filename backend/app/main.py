from collections import defaultdict, deque
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import EngineError
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.seed import seed_demo_data


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger("targettrack.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    if settings.seed_demo_data:
        with SessionLocal() as db:
            try:
                seed_demo_data(db)
            except Exception:
                db.rollback()
                logger.exception("Skipping demo seed due to startup error.")
    logger.info("TargetTrack API ready.")
    yield
    engine.dispose()
    logger.info("TargetTrack API shutdown complete.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_request_buckets: dict[str, deque[float]] = defaultdict(deque)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.detail)
    else:
        logger.info("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.middleware("http")
async def request_log_and_rate_limit(request: Request, call_next):
    started = time.monotonic()
    client = request.client.host if request.client else "unknown"
    key = f"{client}:{request.url.path}"
    now = time.time()
    bucket = _request_buckets[key]
    while bucket and now - bucket[0] > settings.rate_limit_window_seconds:
        bucket.popleft()
    if len(bucket) >= settings.rate_limit_requests:
        logger.warning("Rate limit hit for %s", key)
        return JSONResponse(
            status_code=429,
            content={"kind": "rate_limited", "detail": "Too many requests. Please retry later."},
        )
    bucket.append(now)

    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"kind": "internal_error", "detail": "Internal server error"},
        )

    logger.info(
        "%s %s -> %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.monotonic() - started) * 1000,
    )
    return response


@app.get("/healthz")
def healthz() -> dict:
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/", include_in_schema=False)
def root() -> dict[str, str]:
    return {
        "service": settings.app_name,
        "status": "ok",
        "targets": f"{settings.api_prefix}/targets",
        "docs": "/docs",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


app.include_router(api_router, prefix=settings.api_prefix)
