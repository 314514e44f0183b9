# Configuration and Environment Settings
import os
from pathlib import Path

# API Configuration
API_TITLE = "MDView API"
API_VERSION = "1.2.0"  # Single source of truth for version

# Supported formats
SUPPORTED_EXPORT_FORMATS = ["md", "txt", "html", "json", "toon"]
DEFAULT_EXPORT_FORMAT = "md"


# CORS Settings - load from environment or use secure defaults
def _parse_cors_origins(origins_str: str) -> list[str]:
    """Parse CORS origins from a comma-separated string.

    Args:
        origins_str: Comma-separated list of allowed origins

    Returns:
        List of valid origins with empty strings and duplicates removed
    """
    if not origins_str:
        return []

    origins = [o.strip() for o in origins_str.split(",") if o.strip()]

    # Remove duplicates while preserving order
    return list(dict.fromkeys(origins))


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


# Default CORS origins for development
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",  # Vite default port
    "http://127.0.0.1:5173",
]

_cors_origins_str = os.getenv("CORS_ORIGINS")
if not _cors_origins_str and os.getenv("ENV") == "production":
    # In production, we should NOT have loose defaults
    CORS_ORIGINS = []
    print("WARNING: ENV=production but CORS_ORIGINS is not set. API will be inaccessible from browsers.")
else:
    CORS_ORIGINS = (
        _parse_cors_origins(_cors_origins_str)
        if _cors_origins_str is not None
        else DEFAULT_CORS_ORIGINS
    )

# Security headers configuration
SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# Rate limiting for conversion endpoints (requests per minute)
RATE_LIMIT = _int_env("RATE_LIMIT", 60)

# Input limits
MAX_CONTENT_LENGTH = _int_env("MAX_CONTENT_LENGTH", 5 * 1024 * 1024)  # characters
MAX_UPLOAD_SIZE = _int_env("MAX_UPLOAD_SIZE", 5 * 1024 * 1024)  # bytes

# Document storage
DATA_DIR = Path(os.getenv("MDVIEW_DATA_DIR", str(Path.home() / ".local" / "share" / "mdview")))
DEFAULT_DOCUMENT_NAME = "Untitled"

# Export cache
EXPORT_CACHE_DIR = os.getenv("EXPORT_CACHE_DIR", "exports")
EXPORT_CACHE_TTL = _int_env("EXPORT_CACHE_TTL", 3600)  # 1 hour

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "mdview.log")
