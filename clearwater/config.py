# clearwater/config.py: settings (env / .env) and logging setup
import functools
import logging
import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Runtime settings, overridable with CLEARWATER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLEARWATER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream APIs
    epa_base_url: str = "https://data.epa.gov/efservice"
    zip_api_url: str = "https://api.zippopotam.us/us"
    user_agent: str = "Mozilla/5.0 (compatible; ClearWater/1.0; +https://clearwater.app)"
    verify_tls: bool = True

    # Timeouts (seconds)
    geocode_timeout: float = 8.0
    epa_timeout: float = 20.0

    # Cache
    cache_ttl_seconds: float = 24 * 60 * 60
    cache_max_entries: int = 1000

    # Result caps
    max_systems: int = 15
    max_state_systems: int = 150

    # Static tables
    contaminants_csv: Path = DATA_DIR / "contaminants.csv"

    log_level: str = "INFO"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the CLI and the streamlit app."""
    name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],  # stdout carries --json output
    )
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
