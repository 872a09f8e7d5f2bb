import asyncio
import logging
from typing import Any, Callable, Dict

import requests

from models.prediction import JobState
from services.config import ServiceConfig
from services.errors import (
    ProviderAuthError,
    ProviderRequestError,
    ProviderResponseError,
    ProviderTransportError,
)

logger = logging.getLogger(__name__)

class ReplicateClient:
    """Client for the Replicate predictions API"""

    def __init__(self, config: ServiceConfig, session_factory: Callable[[], requests.Session] = requests.Session):
        self.api_url = config.api_url
        self.timeout = config.request_timeout
        # Each call gets its own session; sessions are not shared across executor threads
        self.session_factory = session_factory
        self.headers = {
            "Authorization": f"Bearer {config.api_key or ''}",
            "Content-Type": "application/json",
        }
        logger.info(f"Replicate client initialized for {self.api_url}")

    async def submit_job(self, payload: Dict[str, Any]) -> JobState:
        """Create a prediction and return its initial state"""
        data = await self._run("POST", self.api_url, json=payload)
        return self._parse_state(data)

    async def get_job_status(self, handle: str) -> JobState:
        """Fetch the current state of a prediction"""
        data = await self._run("GET", f"{self.api_url}/{handle}")
        return self._parse_state(data)

    async def _run(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        # requests is blocking, keep it off the event loop
        return await asyncio.get_running_loop().run_in_executor(
            None,
            lambda: self._request(method, url, **kwargs)
        )

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            with self.session_factory() as session:
                response = session.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ProviderTransportError(f"Request to provider failed: {e}") from e

        if response.status_code == 401:
            raise ProviderAuthError("Provider rejected the API key", status_code=401)

        if not 200 <= response.status_code < 300:
            detail = self._error_detail(response)
            logger.error(f"Provider error response ({response.status_code}): {detail}")
            message = f"Request failed with status code {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise ProviderRequestError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError("Provider returned a non-JSON response") from e

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body.get("title") or "")
        return ""

    @staticmethod
    def _parse_state(data: Dict[str, Any]) -> JobState:
        if not isinstance(data, dict) or not data.get("id"):
            raise ProviderResponseError("Provider response is missing the prediction id")
        return JobState.from_provider(data)
