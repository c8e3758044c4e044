"""Configuration settings for the shop service."""
import os
from dataclasses import dataclass
from typing import Optional, Tuple

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cream_business.db")

# Authentication
DEFAULT_JWT_SECRET = "change-me"
JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
JWT_ALGORITHM = "HS256"
TOKEN_TTL_HOURS = 24

# Bootstrap admin (created at startup when no admin exists yet)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

# Product images
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_IMAGE_BYTES = 1_000_000
ALLOWED_IMAGE_TYPES: Tuple[str, ...] = ("jpeg", "jpg", "png", "webp")

# Order placement: "atomic" (all-or-nothing) or "sequential" (legacy per-item commits)
STOCK_POLICY = os.getenv("STOCK_POLICY", "atomic")

# Telemetry sinks (disabled when unset)
OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
PYROSCOPE_SERVER = os.getenv("PYROSCOPE_SERVER_ADDRESS")

# Application Settings
PORT = int(os.getenv("PORT", "3000"))
SERVICE_NAME = "shop-service"
API_VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    """Runtime settings handed to the application factory."""
    database_url: str = DATABASE_URL
    jwt_secret: str = JWT_SECRET
    upload_dir: str = UPLOAD_DIR
    stock_policy: str = STOCK_POLICY
    admin_username: Optional[str] = ADMIN_USERNAME
    admin_password: Optional[str] = ADMIN_PASSWORD
    otlp_endpoint: Optional[str] = OTEL_EXPORTER_OTLP_ENDPOINT
    pyroscope_server: Optional[str] = PYROSCOPE_SERVER

    def __post_init__(self):
        if self.stock_policy not in ("atomic", "sequential"):
            raise ValueError(f"Unknown stock policy: {self.stock_policy!r}")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            database_url=os.getenv("DATABASE_URL", DATABASE_URL),
            jwt_secret=os.getenv("JWT_SECRET", JWT_SECRET),
            upload_dir=os.getenv("UPLOAD_DIR", UPLOAD_DIR),
            stock_policy=os.getenv("STOCK_POLICY", STOCK_POLICY),
            admin_username=os.getenv("ADMIN_USERNAME", ADMIN_USERNAME),
            admin_password=os.getenv("ADMIN_PASSWORD", ADMIN_PASSWORD),
            otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", OTEL_EXPORTER_OTLP_ENDPOINT),
            pyroscope_server=os.getenv("PYROSCOPE_SERVER_ADDRESS", PYROSCOPE_SERVER),
        )
