"""Client configuration loaded from the environment."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from rscmp_client.config.constants import AVAILABLE_LANGUAGES, DEFAULT_PAGE_SIZE


@dataclass
class ClientSettings:
    """Configuration for a connection to an RSCMP backend."""

    base_url: str = "http://localhost:5000/api"
    timeout: float = 30.0
    storage_dir: str = ".rscmp"
    language: str = "en"
    log_level: str = "WARNING"
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        if self.language not in AVAILABLE_LANGUAGES:
            available = ", ".join(AVAILABLE_LANGUAGES)
            raise ValueError(
                f"Language '{self.language}' not supported. Available: {available}"
            )


def load_settings() -> ClientSettings:
    """Build settings from RSCMP_* environment variables and an optional .env file."""
    load_dotenv()

    defaults = ClientSettings()
    return ClientSettings(
        base_url=os.getenv("RSCMP_BASE_URL", defaults.base_url),
        timeout=float(os.getenv("RSCMP_TIMEOUT", defaults.timeout)),
        storage_dir=os.getenv("RSCMP_STORAGE_DIR", defaults.storage_dir),
        language=os.getenv("RSCMP_LANGUAGE", defaults.language).lower(),
        log_level=os.getenv("RSCMP_LOG_LEVEL", defaults.log_level).upper(),
        page_size=int(os.getenv("RSCMP_PAGE_SIZE", defaults.page_size)),
    )


def list_available_languages() -> list[str]:
    """List all supported UI languages."""
    return list(AVAILABLE_LANGUAGES)
