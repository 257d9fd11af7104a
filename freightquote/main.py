from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from freightquote.api import quotes
from freightquote.core.config import settings
from freightquote.core.errors import QuoteError
from freightquote.core.redis import init_redis, close_redis
from freightquote.core.store import RedisStore
from freightquote.core.metrics import request_count, request_duration, redis_connected, get_metrics_text
from freightquote.services.distance import DistanceCache, DistanceResolver, GoogleDistanceMatrix
from freightquote.services.ledger import QuoteLedger
from freightquote.services.quotes import QuoteService
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(time.time() - start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    logger.info("Initializing Redis connection...")
    try:
        redis = await init_redis()
    except Exception:
        redis_connected.set(0)
        raise
    redis_connected.set(1)

    store = RedisStore(redis)
    lookup = GoogleDistanceMatrix(
        api_key=settings.GOOGLE_MAPS_API_KEY,
        url=settings.DISTANCE_MATRIX_URL,
        timeout=settings.DISTANCE_LOOKUP_TIMEOUT,
    )
    if not settings.GOOGLE_MAPS_API_KEY:
        logger.warning("GOOGLE_MAPS_API_KEY is not set; only cached distances can be quoted")

    app.state.quote_service = QuoteService(DistanceResolver(lookup, DistanceCache(store)))
    app.state.ledger = await QuoteLedger.load(store, settings.LEDGER_KEY)

    yield

    logger.info("Application shutting down...")
    app.state.ledger = None
    await close_redis()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(quotes.router)


@app.exception_handler(QuoteError)
async def quote_error_handler(request: Request, exc: QuoteError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Invalid value for {field}: {errors[0].get('msg')}" if field else errors[0].get("msg")
    else:
        message = "Invalid request."
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check(request: Request):
    ledger = getattr(request.app.state, "ledger", None)

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "ledger": "loaded" if ledger is not None else "unavailable",
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check(request: Request):
    if getattr(request.app.state, "ledger", None) is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Quote ledger not loaded"}
        )

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
