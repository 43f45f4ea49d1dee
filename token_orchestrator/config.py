"""
Configuration module for Token Orchestrator
"""

import os

import dotenv

# Pick up a local .env before any value is read
dotenv.load_dotenv()


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def env_float(key: str, default: float) -> float:
    """Get a float from the environment, falling back on malformed values"""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Version information
APP_NAME = os.getenv("APP_NAME", "token-orchestrator")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Lease configuration (seconds)
LEASE_DURATION_SECONDS = env_float("LEASE_DURATION_SECONDS", 5 * 60)

# Reaper configuration (seconds)
REAPER_ENABLED = env_bool("REAPER_ENABLED", True)
REAPER_INTERVAL_SECONDS = env_float("REAPER_INTERVAL_SECONDS", 60)

# CORS configuration
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_CONFIG_FILE = os.getenv("LOG_CONFIG_FILE", "LOGGING.yaml")
HTTP_LOG_EXCLUDE_PATHS = set(
    p for p in os.getenv("HTTP_LOG_EXCLUDE_PATHS", "/healthz,/metrics/prometheus").split(",") if p
)
