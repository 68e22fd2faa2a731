"""FastAPI application setup and error envelopes for the CWA forecast proxy."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import router as api_router
from .config import settings
from .errors import ForecastError
from .locations import list_locations
from utils.logging_utils import get_tagged_logger, setup_logging

JOB_NAME = "cwa-forecast-proxy"

setup_logging(level=settings.log_level, job_name=JOB_NAME)
logger = get_tagged_logger(__name__, tag="app/main")

app = FastAPI(title="CWA Forecast Proxy")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_HTTP_ERROR_LABELS = {
    401: "Unauthorized",
    404: "Not found",
    405: "Method not allowed",
}


@app.exception_handler(ForecastError)
async def handle_forecast_error(request: Request, exc: ForecastError):
    """Render domain errors as {error, message[, details]}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    """Keep framework errors (auth, unknown routes) in the same envelope."""
    label = _HTTP_ERROR_LABELS.get(exc.status_code, "Request error")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": label, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    """Last resort: log with traceback, answer 500."""
    logger.exception(f"Unhandled error serving {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Server error", "message": "Unable to fetch weather data, please try again later"},
    )


@app.get("/")
def index():
    """Describe the available endpoints and supported location codes."""
    return {
        "message": "CWA weather forecast API (all Taiwan counties and cities)",
        "endpoints": {
            "cityWeather": "/api/weather/{city}",
            "cityWeather36h": "/api/weather/{city}/36h",
            "health": "/api/health",
        },
        "locations": list_locations(),
    }


app.include_router(api_router, prefix="/api")
