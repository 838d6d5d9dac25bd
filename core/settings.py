from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_LOCATIONIQ_SEARCH_URL = "https://us1.locationiq.com/v1/search.php"
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024
SUPPORTED_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return tuple()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env(name: str) -> str | None:
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    normalized = raw_value.strip()
    return normalized or None


def _env_flag(name: str, default: str = "false") -> bool:
    return (_env(name) or default).lower() in {"1", "true", "yes"}


def collect_missing_required_env_vars() -> list[str]:
    missing: list[str] = []

    always_required = (
        "MONGO_URL",
        "DB_NAME",
        "LOCATIONIQ_API_KEY",
    )
    for var_name in always_required:
        if _env(var_name) is None:
            missing.append(var_name)

    return sorted(set(missing))


def collect_invalid_env_values() -> list[str]:
    invalid_values: list[str] = []

    timeout = _env("GEOCODING_TIMEOUT_SECONDS")
    if timeout is not None:
        try:
            if float(timeout) <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append("GEOCODING_TIMEOUT_SECONDS must be a positive number")

    max_image_bytes = _env("MAX_IMAGE_BYTES")
    if max_image_bytes is not None:
        try:
            if int(max_image_bytes) <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append("MAX_IMAGE_BYTES must be a positive integer")

    log_level = (_env("LOG_LEVEL") or "INFO").upper()
    if log_level not in SUPPORTED_LOG_LEVELS:
        invalid_values.append("LOG_LEVEL must be one of: CRITICAL, ERROR, WARNING, INFO, DEBUG")

    port = _env("PORT")
    if port is not None:
        try:
            if not 0 < int(port) < 65536:
                raise ValueError("out of range")
        except ValueError:
            invalid_values.append("PORT must be an integer between 1 and 65535")

    search_url = _env("LOCATIONIQ_SEARCH_URL")
    if search_url is not None and not search_url.startswith(("http://", "https://")):
        invalid_values.append("LOCATIONIQ_SEARCH_URL must be an http(s) URL")

    return invalid_values


def validate_required_environment() -> None:
    missing_vars = collect_missing_required_env_vars()
    invalid_values = collect_invalid_env_values()
    if not missing_vars and not invalid_values:
        return

    message_lines = ["Application startup blocked by invalid environment configuration."]
    if missing_vars:
        message_lines.append("")
        message_lines.append("Missing required environment variables:")
        message_lines.extend(f"- {name}" for name in missing_vars)
    if invalid_values:
        message_lines.append("")
        message_lines.append("Invalid environment values:")
        message_lines.extend(f"- {message}" for message in invalid_values)
    raise RuntimeError("\n".join(message_lines))


@dataclass(frozen=True)
class Settings:
    env: str
    mongo_url: str
    db_name: str
    locationiq_api_key: str
    locationiq_search_url: str
    geocoding_timeout_seconds: float
    storage_local_root: str
    max_image_bytes: int
    cors_origins: tuple[str, ...]
    debug_include_error_details: bool
    log_level: str
    host: str
    port: int

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    validate_required_environment()

    return Settings(
        env=os.getenv("ENV", "development"),
        mongo_url=_env("MONGO_URL") or "",
        db_name=_env("DB_NAME") or "",
        locationiq_api_key=_env("LOCATIONIQ_API_KEY") or "",
        locationiq_search_url=_env("LOCATIONIQ_SEARCH_URL") or DEFAULT_LOCATIONIQ_SEARCH_URL,
        geocoding_timeout_seconds=float(_env("GEOCODING_TIMEOUT_SECONDS") or 10),
        storage_local_root=_env("STORAGE_LOCAL_ROOT") or "uploads/images",
        max_image_bytes=int(_env("MAX_IMAGE_BYTES") or DEFAULT_MAX_IMAGE_BYTES),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS")),
        debug_include_error_details=_env_flag("DEBUG_INCLUDE_ERROR_DETAILS"),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        host=_env("HOST") or "0.0.0.0",
        port=int(_env("PORT") or 8000),
    )
