"""
FastAPI web application for the CPG Performance Dashboard API.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, JSONResponse
from pymongo.errors import PyMongoError
from starlette.middleware.gzip import GZipMiddleware

from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from web.config import (
    VERSION, WEB_HOST, WEB_PORT, ENVIRONMENT,
    CORS_ORIGINS, CORS_METHODS, CORS_HEADERS,
)
from web.routes import api
from web.routes.api._deps import limiter
from web.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from core.config import config, validate_config, ConfigurationError
from core.database import close_client
from core.exceptions import QueryError
from core.observability import setup_logging, get_logger

# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
setup_logging(level=config.logging.level, json_format=config.logging.json_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"CPG Dashboard API {VERSION} starting ({ENVIRONMENT})...")

    # Missing Mongo settings are reported per request, not fatal here
    try:
        validate_config()
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.warning(f"{e}")

    logger.info(f"API server listening on port {WEB_PORT}")
    yield

    try:
        await close_client()
    except Exception as e:
        logger.warning(f"Error closing MongoDB client: {e}")
    logger.info("CPG Dashboard API stopped")


app = FastAPI(
    title="CPG Performance Dashboard API",
    description="Retail execution, availability, supply chain and wallet share metrics",
    version=VERSION,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail
        }
    )


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    # Raised by the database dependency before the route body runs
    logger.error(f"Configuration error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(PyMongoError)
async def mongo_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"MongoDB error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# Request logging (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# Must be AFTER logging so correlation_id is set when timeout fires
app.add_middleware(RequestTimeoutMiddleware)

app.add_middleware(GZipMiddleware, minimum_size=500)

# Outermost, so preflight and error responses carry CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
)

app.include_router(api.router, prefix="/api")


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run("web.main:app", host=WEB_HOST, port=WEB_PORT)


if __name__ == "__main__":
    run()
