from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from starlette.exceptions import HTTPException

from artmarket.config import settings
from artmarket.api.artworks import router as artworks_router
from artmarket.api.checkout import router as checkout_router
from artmarket.api.messages import router as messages_router
from artmarket.api.profiles import router as profiles_router
from artmarket.api.webhooks import router as webhooks_router
from artmarket.middleware.rate_limit import RateLimitMiddleware
from artmarket.middleware.security import SecurityHeadersMiddleware

# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        (
            structlog.dev.ConsoleRenderer()
            if settings.APP_ENV == "development"
            else structlog.processors.JSONRenderer()
        ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(0),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("starting_up", env=settings.APP_ENV)
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await redis.ping()
        log.info("redis_connected", url=settings.REDIS_URL)
    except Exception as e:
        log.warning("redis_connection_failed", error=str(e))
    app.state.redis = redis

    yield

    # Shutdown
    log.info("shutting_down")
    await redis.close()


app = FastAPI(
    title="Art Market",
    lifespan=lifespan,
)

# CORS middleware for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Security headers (outermost -- runs last on request, first on response)
app.add_middleware(SecurityHeadersMiddleware)

# Rate limiting (runs after security headers are already queued)
app.add_middleware(RateLimitMiddleware)


# Errors reach clients as {"error": "<message>"}
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
        message = f"Invalid or missing field '{field}': {first.get('msg')}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(checkout_router)
app.include_router(webhooks_router)
app.include_router(artworks_router)
app.include_router(messages_router)
app.include_router(profiles_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
