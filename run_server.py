import os

import uvicorn

from app.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_credentials() -> None:
    """
    Warn at startup when the upstream credential is missing. The server still
    starts; weather requests answer 500 until CWA_API_KEY is set.
    """
    if settings.forecast_source == "cwa" and not settings.api_key:
        logger.warning("CWA_API_KEY is not set; /api/weather requests will fail with a configuration error.")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="cwa-forecast-proxy")
    check_credentials()

    port = int(os.getenv("PORT", 3000))
    logger.info(f"Serving CWA forecast proxy on port {port}")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )
