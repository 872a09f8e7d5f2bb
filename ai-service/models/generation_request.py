from pydantic import BaseModel, Field, field_validator
from typing import Optional

DEFAULT_NEGATIVE_PROMPT = "low quality, blurry, ugly"
DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_STEPS = 25

class GenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    negative_prompt: str = Field(default=DEFAULT_NEGATIVE_PROMPT)
    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    steps: int = Field(default=DEFAULT_STEPS, gt=0)
    user_id: Optional[str] = Field(default=None, alias="userId")
    user_name: Optional[str] = Field(default=None, alias="userName")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "prompt": "anime girl with silver hair, school uniform",
                "negative_prompt": "low quality, blurry, ugly",
                "width": 512,
                "height": 512,
                "steps": 25,
                "userId": "123456",
                "userName": "builderman"
            }
        }
    }

    @field_validator("negative_prompt", "width", "height", "steps", mode="before")
    @classmethod
    def empty_means_default(cls, value, info):
        """Null, empty or zero values fall back to the field default"""
        if value is None or value == "" or value == 0:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("user_id", "user_name", mode="before")
    @classmethod
    def stringify_user_fields(cls, value):
        # Roblox sends numeric user ids
        if value is None:
            return None
        return str(value)

class GenerationMetadata(BaseModel):
    userId: Optional[str] = None
    userName: Optional[str] = None
    generationTime: int

class GenerationResponse(BaseModel):
    success: bool = True
    imageUrl: str
    robloxAssetId: Optional[str] = None
    message: str
    metadata: Optional[GenerationMetadata] = None

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
