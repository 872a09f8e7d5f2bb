from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from models.generation_request import GenerationRequest, GenerationResponse, GenerationMetadata, ErrorResponse
from models.generation_result import GenerationOutcome, GenerationResult
from services.config import ServiceConfig
from services.generation_orchestrator import GenerationOrchestrator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Roblox Anime Generator API"
TEST_IMAGE_URL = "https://replicate.delivery/pbxt/example-anime.png"

ENDPOINTS = {
    "generate": "POST /generate-anime",
    "test": "POST /generate-test",
    "health": "GET /health",
}

STATUS_CODES = {
    GenerationOutcome.SUCCEEDED: 200,
    GenerationOutcome.FAILED: 500,
    GenerationOutcome.AUTH_ERROR: 500,
    GenerationOutcome.TIMEOUT: 504,
}

# Global variables
orchestrator: Optional[GenerationOrchestrator] = None
started_at = time.monotonic()

def uvicorn_options(config: ServiceConfig) -> dict:
    return {
        "host": "0.0.0.0",
        "port": config.port,
        "log_level": config.log_level.lower(),
        "reload": False
    }

def log_startup_banner(config: ServiceConfig):
    logger.info("=" * 50)
    logger.info(SERVICE_NAME.upper())
    logger.info("=" * 50)
    logger.info(f"Server running on port {config.port}")
    logger.info(f"URL: http://localhost:{config.port}")
    logger.info("Endpoints:")
    logger.info("  GET  / - Server info")
    logger.info("  GET  /health - Health check")
    logger.info("  POST /generate-anime - Generate anime image")
    logger.info("  POST /generate-test - Test endpoint")
    logger.info(f"API Key configured: {'Yes' if config.api_key_configured else 'No (update required)'}")
    logger.info("=" * 50)

@asynccontextmanager
async def lifespan(app: FastAPI):
    global orchestrator

    # __main__ hands over the config it started uvicorn with
    config = getattr(app.state, "config", None) or ServiceConfig.from_env()
    app.state.config = config
    logging.getLogger().setLevel(config.log_level)

    logger.info("Initializing generation service...")
    orchestrator = GenerationOrchestrator(config)
    log_startup_banner(config)

    yield

    logger.info("Shutting down generation service...")
    orchestrator = None

app = FastAPI(
    title=SERVICE_NAME,
    description="Generates anime avatars for Roblox players through Replicate",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump()
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Invalid request to {request.url.path}: {errors}")

    # An empty or non-object body has no prompt either
    prompt_missing = any(
        "prompt" in err.get("loc", ()) or tuple(err.get("loc", ())) == ("body",)
        for err in errors
    )
    if prompt_missing:
        return error_response(400, "Missing prompt parameter", "Invalid request")
    return error_response(400, "Invalid request parameters", "Invalid request")

def to_response(result: GenerationResult, request: GenerationRequest) -> JSONResponse:
    status_code = STATUS_CODES[result.outcome]
    if not result.success:
        return error_response(status_code, result.error or "Generation failed", result.message)

    body = GenerationResponse(
        imageUrl=result.image_url,
        robloxAssetId=result.asset_id,
        message=result.message,
        metadata=GenerationMetadata(
            userId=request.user_id,
            userName=request.user_name,
            generationTime=result.elapsed_polls
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())

@app.get("/")
async def root():
    return {
        "status": "online",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": ENDPOINTS
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "uptime": time.monotonic() - started_at,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.post("/generate-anime")
async def generate_anime(request: GenerationRequest, http_request: Request):
    if not orchestrator:
        raise HTTPException(status_code=503, detail="Generation service not initialized")

    logger.info(f"New generation request from {request.user_name} ({request.user_id})")
    logger.info(f"Prompt: {request.prompt}")

    result = await orchestrator.generate(request, abort_check=http_request.is_disconnected)

    logger.info(f"Request finished: {result.outcome.value} after {result.elapsed_polls} polls")
    return to_response(result, request)

@app.post("/generate-test")
async def generate_test():
    """Canned response for wiring up the Roblox side without spending credits"""
    logger.info("Test generation request")
    return {
        "success": True,
        "imageUrl": TEST_IMAGE_URL,
        "robloxAssetId": None,
        "message": "Test image generated!"
    }

if __name__ == "__main__":
    import uvicorn
    service_config = ServiceConfig.from_env()
    app.state.config = service_config
    uvicorn.run(app, **uvicorn_options(service_config))
