import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from models.generation_request import GenerationRequest
from models.generation_result import GenerationOutcome, GenerationResult
from models.prediction import JobState, JobStatus
from services.config import ServiceConfig
from services.errors import ProviderAuthError
from services.replicate_client import ReplicateClient

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Anime avatar generated successfully!"
FAILED_MESSAGE = "Failed to generate image. Please try again."
TIMEOUT_MESSAGE = "Generation took too long. Please try again."
SERVER_ERROR_MESSAGE = "Server error occurred. Please try again."
CONFIG_ERROR_MESSAGE = "Server configuration error. Please contact admin."

PROGRESS_LOG_EVERY = 5

class GenerationOrchestrator:
    """Drives one Replicate prediction from submission to a GenerationResult.

    All provider, transport and timeout failures are folded into the returned
    result; only task cancellation propagates.
    """

    GUIDANCE_SCALE = 7.5
    NUM_OUTPUTS = 1
    SCHEDULER = "DPMSolverMultistep"

    def __init__(
        self,
        config: ServiceConfig,
        provider=None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config
        self.provider = provider or ReplicateClient(config)
        self.sleep = sleep

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "version": self.config.model_version,
            "input": {
                "prompt": request.prompt,
                "negative_prompt": request.negative_prompt,
                "width": request.width,
                "height": request.height,
                "num_inference_steps": request.steps,
                "guidance_scale": self.GUIDANCE_SCALE,
                "num_outputs": self.NUM_OUTPUTS,
                "scheduler": self.SCHEDULER,
            },
        }

    async def generate(
        self,
        request: GenerationRequest,
        abort_check: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> GenerationResult:
        if not self.config.api_key_configured:
            logger.error("Rejecting generation request: REPLICATE_API_KEY is not configured")
            return self._auth_error(0)

        logger.info(f"Submitting generation for user {request.user_name}: {request.prompt[:50]}...")

        try:
            prediction = await self.provider.submit_job(self.build_payload(request))
        except ProviderAuthError:
            logger.error("Provider rejected the configured API key")
            return self._auth_error(0)
        except Exception as e:
            logger.error(f"Failed to submit prediction: {e}")
            return self._server_error(str(e), 0)

        logger.info(f"Prediction created: {prediction.handle} (status: {prediction.status.value})")

        polls = 0
        try:
            while not prediction.status.is_terminal and polls < self.config.max_polls:
                if abort_check is not None and await abort_check():
                    logger.warning(f"Client disconnected, abandoning prediction {prediction.handle}")
                    return GenerationResult(
                        success=False,
                        outcome=GenerationOutcome.FAILED,
                        error="Client disconnected",
                        message=SERVER_ERROR_MESSAGE,
                        elapsed_polls=polls,
                    )

                await self.sleep(self.config.poll_interval)
                prediction = await self.provider.get_job_status(prediction.handle)
                polls += 1

                if polls % PROGRESS_LOG_EVERY == 0:
                    logger.info(f"Generating... {polls} polls elapsed (status: {prediction.status.value})")
        except ProviderAuthError:
            logger.error(f"Provider rejected the API key while polling {prediction.handle}")
            return self._auth_error(polls)
        except Exception as e:
            logger.error(f"Error while polling prediction {prediction.handle}: {e}")
            return self._server_error(str(e), polls)

        logger.info(f"Final status for {prediction.handle}: {prediction.status.value}")
        return self._reconcile(prediction, polls)

    def _reconcile(self, prediction: JobState, polls: int) -> GenerationResult:
        if prediction.status == JobStatus.SUCCEEDED:
            if not prediction.output or not prediction.output[0]:
                logger.error(f"Prediction {prediction.handle} succeeded without output")
                return GenerationResult(
                    success=False,
                    outcome=GenerationOutcome.FAILED,
                    error="Provider returned no output",
                    message=FAILED_MESSAGE,
                    elapsed_polls=polls,
                )

            image_url = prediction.output[0]
            logger.info(f"Image generated successfully: {image_url}")
            return GenerationResult(
                success=True,
                outcome=GenerationOutcome.SUCCEEDED,
                image_url=image_url,
                message=SUCCESS_MESSAGE,
                elapsed_polls=polls,
            )

        if prediction.status == JobStatus.FAILED:
            logger.error(f"Generation failed: {prediction.error}")
            return GenerationResult(
                success=False,
                outcome=GenerationOutcome.FAILED,
                error=prediction.error or "Generation failed",
                message=FAILED_MESSAGE,
                elapsed_polls=polls,
            )

        # canceled, or still running once the poll ceiling is reached
        logger.error(f"Generation timed out after {polls} polls (status: {prediction.status.value})")
        return GenerationResult(
            success=False,
            outcome=GenerationOutcome.TIMEOUT,
            error="Timeout",
            message=TIMEOUT_MESSAGE,
            elapsed_polls=polls,
        )

    def _auth_error(self, polls: int) -> GenerationResult:
        return GenerationResult(
            success=False,
            outcome=GenerationOutcome.AUTH_ERROR,
            error="Invalid API key",
            message=CONFIG_ERROR_MESSAGE,
            elapsed_polls=polls,
        )

    def _server_error(self, error: str, polls: int) -> GenerationResult:
        return GenerationResult(
            success=False,
            outcome=GenerationOutcome.FAILED,
            error=error,
            message=SERVER_ERROR_MESSAGE,
            elapsed_polls=polls,
        )
