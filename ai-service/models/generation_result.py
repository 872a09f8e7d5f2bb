from enum import Enum
from typing import Optional

from pydantic import BaseModel

class GenerationOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMEOUT = "timeout"
    AUTH_ERROR = "auth_error"

class GenerationResult(BaseModel):
    """Final outcome of one generation request, built once and never changed"""
    success: bool
    outcome: GenerationOutcome
    message: str
    image_url: Optional[str] = None
    # Reserved for uploading the image to Roblox as an asset
    asset_id: Optional[str] = None
    error: Optional[str] = None
    elapsed_polls: int = 0

    model_config = {"frozen": True}
