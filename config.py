import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = field(default_factory=lambda: os.getenv("API_HOST", "127.0.0.1"))
    api_port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8080")))
    api_base_url: str = field(default_factory=lambda: os.getenv("API_BASE_URL", ""))
    api_timeout: float = field(default_factory=lambda: float(os.getenv("API_TIMEOUT", "5")))

    # Application settings
    app_name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Book Inventory API"))
    app_version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "False"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Inventory settings
    seed_books: bool = field(default_factory=lambda: _env_bool("LIBRARY_SEED_BOOKS", "True"))

    def __post_init__(self) -> None:
        if not self.api_base_url:
            self.api_base_url = f"http://{self.api_host}:{self.api_port}"
        self.api_base_url = self.api_base_url.rstrip("/")


settings = Settings()
