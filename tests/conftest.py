"""
Shared fixtures for the try-on test suite.
"""

import io
import json

import httpx
import pytest
from PIL import Image

from vogue_tryon.clients.gemini import GeminiImageClient
from vogue_tryon.config import GeminiConfig


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def gemini_config():
    return GeminiConfig(api_key="test-key", model="gemini-2.5-flash-image")


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def make_client(gemini_config, recorded_requests):
    """Build a client whose transport answers every call with ``body``."""

    def factory(body, status_code=200):
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(
                {
                    "url": str(request.url),
                    "headers": dict(request.headers),
                    "json": json.loads(request.content),
                }
            )
            return httpx.Response(status_code, json=body)

        client = GeminiImageClient(gemini_config, transport=httpx.MockTransport(handler))
        return client

    return factory


