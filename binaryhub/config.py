import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent.parent

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:3000",
]


def str_to_bool(v: str) -> bool:
    return str(v).lower() in {"1", "true", "yes", "y", "on"}


def split_origins(v: str) -> List[str]:
    return [o.strip().rstrip("/") for o in (v or "").split(",") if o.strip()]


@dataclass
class Config:
    MONGODB_URL: str
    MONGODB_DB_NAME: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int
    ENVIRONMENT: str
    DEBUG: bool
    UPLOADS_DIR: Path
    MAX_UPLOAD_BYTES: int
    RENEWAL_CHECK_INTERVAL_SECONDS: int
    ALLOW_ADMIN_SIGNUP: bool
    TELEGRAM_BOT_TOKEN: str
    TELEGRAM_ADMIN_ID: int
    HOST: str
    PORT: int
    FRONTEND_ORIGINS: List[str] = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> List[str]:
        return self.FRONTEND_ORIGINS + [o for o in DEV_ORIGINS if o not in self.FRONTEND_ORIGINS]


def load_config() -> Config:
    port_str = os.getenv("PORT") or "5000"
    return Config(
        MONGODB_URL=os.getenv("MONGODB_URL", "mongodb://localhost:27017"),
        MONGODB_DB_NAME=os.getenv("MONGODB_DB_NAME", "binaryhub"),
        JWT_SECRET=(
            os.getenv("JWT_SECRET")
            or os.getenv("SESSION_SECRET")
            or "your-super-secret-jwt-key-change-this"
        ),
        JWT_ALGORITHM=os.getenv("JWT_ALGORITHM", "HS256"),
        ACCESS_TOKEN_EXPIRE_MINUTES=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")),
        ENVIRONMENT=os.getenv("ENVIRONMENT", "development"),
        DEBUG=str_to_bool(os.getenv("DEBUG", "false")),
        UPLOADS_DIR=Path(os.getenv("UPLOADS_DIR", str(BASE_DIR / "public" / "uploads"))).resolve(),
        MAX_UPLOAD_BYTES=int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
        RENEWAL_CHECK_INTERVAL_SECONDS=int(os.getenv("RENEWAL_CHECK_INTERVAL_SECONDS", "3600")),
        ALLOW_ADMIN_SIGNUP=str_to_bool(os.getenv("ALLOW_ADMIN_SIGNUP", "true")),
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        TELEGRAM_ADMIN_ID=int(os.getenv("TELEGRAM_ADMIN_ID", "0")),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(port_str),
        FRONTEND_ORIGINS=split_origins(os.getenv("FRONTEND_URL", "")),
    )


def setup_logging(debug: bool):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )


CONFIG = load_config()
