"""Shared fixtures for the generation service tests."""

from unittest.mock import AsyncMock

import pytest

from helpers import TEST_API_KEY
from models.generation_request import GenerationRequest
from services.config import ServiceConfig


@pytest.fixture
def config():
    return ServiceConfig(api_key=TEST_API_KEY, poll_interval=1.0, max_polls=120)


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def cat_request():
    return GenerationRequest(prompt="a cat", width=512, height=512, userId="42", userName="alice")
