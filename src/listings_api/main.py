import logging

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers import listings as listings_router
from .settings import get_settings
from .sources import Source, get_source
from .utils import upstream_error_body

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "listings",
        "description": "Normalized, paginated listings of quotes, invoices, and items.",
    },
]

_settings = get_settings()
logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Listings Backend",
    description="Normalizes inconsistent upstream list responses into trustworthy pagination envelopes.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": exc.errors(),
        },
    )


@app.exception_handler(httpx.HTTPError)
async def upstream_exception_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    """
    Report upstream transport and status failures as 502 Bad Gateway.
    """
    logger.error("Upstream request failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content=upstream_error_body(exc))


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(source: Source = Depends(get_source)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the configured source kind.
    """
    return {"message": "Healthy", "backend": source.kind}


# Include routers
app.include_router(listings_router.router)
