
# robotevents/config.py
import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://www.robotevents.com/api/v2"


class Settings(BaseModel):
    base_url: str = Field(default_factory=lambda: os.getenv("ROBOTEVENTS_BASE_URL", DEFAULT_BASE_URL))
    token: Optional[str] = Field(default_factory=lambda: os.getenv("ROBOTEVENTS_TOKEN"))
    timeout: float = Field(default_factory=lambda: float(os.getenv("ROBOTEVENTS_TIMEOUT", "30")))
    retries: int = Field(default_factory=lambda: int(os.getenv("ROBOTEVENTS_RETRIES", "2")))
    per_page: int = Field(default_factory=lambda: int(os.getenv("ROBOTEVENTS_PER_PAGE", "250")))
    # seconds between background polls of watched handles/collections
    poll_interval: float = Field(default_factory=lambda: float(os.getenv("ROBOTEVENTS_POLL_INTERVAL", "5")))


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
