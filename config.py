import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    debug: bool = field(default_factory=lambda: _as_bool(os.getenv("DEBUG", "False")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Database
    database_url: str = field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./books.db")
    )

    # Google Books
    google_books_url: str = field(
        default_factory=lambda: os.getenv(
            "GOOGLE_BOOKS_URL", "https://www.googleapis.com/books/v1/volumes"
        )
    )

    # CORS
    cors_origins: List[str] = field(
        default_factory=lambda: _split(os.getenv("CORS_ORIGINS", "*"))
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()
