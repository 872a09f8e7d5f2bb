import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"
DEFAULT_API_URL = "https://api.replicate.com/v1/predictions"
DEFAULT_MODEL_VERSION = "cjwbw/anything-v3.0:f410ed4c6a0c3bf8b76747860b3a3c9e4c8b5a827a16eac9dd5ad9642edce9a2"

class ServiceConfig(BaseModel):
    """Process configuration, read once at startup"""
    api_key: Optional[str] = Field(default=None, repr=False)
    api_url: str = DEFAULT_API_URL
    model_version: str = DEFAULT_MODEL_VERSION
    port: int = 3000
    poll_interval: float = Field(default=1.0, ge=0)
    max_polls: int = Field(default=120, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"

    model_config = {"frozen": True}

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        # Load environment variables from .env file
        load_dotenv()

        config = cls(
            api_key=os.getenv("REPLICATE_API_KEY") or None,
            api_url=os.getenv("REPLICATE_API_URL", DEFAULT_API_URL).rstrip("/"),
            model_version=os.getenv("REPLICATE_MODEL_VERSION", DEFAULT_MODEL_VERSION),
            port=int(os.getenv("PORT", "3000")),
            poll_interval=float(os.getenv("POLL_INTERVAL_SECONDS", "1.0")),
            max_polls=int(os.getenv("MAX_POLL_ATTEMPTS", "120")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        if not config.api_key_configured:
            logger.warning("REPLICATE_API_KEY is not set, generation requests will be rejected")
        return config
