"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the CWA forecast proxy."""
    model_config = SettingsConfigDict(env_prefix="CWA_", env_file=".env", extra="ignore")

    api_key: str | None = None  # CWA authorization code (CWA_API_KEY)
    api_base_url: str = "https://opendata.cwa.gov.tw/api"
    short_range_dataset: str = "F-C0032-001"  # 36-hour county forecast
    weekly_dataset: str = "F-D0047-091"  # one-week county forecast
    short_range_elements: str = "Wx,PoP,MinT,MaxT,CI"
    weekly_elements: str = "Wx,PoP12h,MinT,MaxT,T"
    driver_element: str = "Wx"
    future_days: int = 7
    request_timeout_seconds: float = 10.0
    forecast_source: str = "cwa"  # options: cwa, file
    fixture_dir: str | None = None
    service_api_key: str | None = None  # inbound X-API-Key; unset = open access
    log_level: str = "INFO"

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("short_range_elements", "weekly_elements", mode="after")
    @classmethod
    def compact_element_list(cls, v: str) -> str:
        """Drop blanks and stray spaces from comma-separated element codes."""
        return ",".join(code.strip() for code in str(v).split(",") if code.strip())

    def element_codes(self, dataset: str) -> list[str]:
        """Element codes requested for ``dataset`` ("weekly" or "short_range")."""
        raw = self.weekly_elements if dataset == "weekly" else self.short_range_elements
        return raw.split(",") if raw else []


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'api_key', 'service_api_key'})}")
