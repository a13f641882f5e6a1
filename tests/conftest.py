"""Shared fixtures: small in-memory photos and scriptable provider doubles."""

import io
import asyncio
import base64
from typing import List, Optional

import pytest
from PIL import Image

from src.models.visualize import ProviderResult
from src.services.visualize_service.providers import VisualizationProvider


def make_image_b64(size=(64, 48), fmt="PNG") -> str:
    img = Image.new("RGB", size, (20, 30, 60))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode("utf-8")


class FakeProvider(VisualizationProvider):
    """Records calls into a shared list and returns or raises what it was told to."""

    def __init__(
        self,
        name: str,
        calls: List[str],
        result: Optional[ProviderResult] = None,
        exc: Optional[BaseException] = None,
        delay: float = 0,
    ):
        self.name = name
        self.calls = calls
        self.result = result
        self.exc = exc
        self.delay = delay
        self.prompts: List[str] = []

    async def generate(self, prompt, image_b64, mime_type):
        self.calls.append(self.name)
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.result


@pytest.fixture
def png_b64() -> str:
    return make_image_b64()


@pytest.fixture
def calls() -> List[str]:
    return []


@pytest.fixture
def fake_provider(calls):
    """Factory for FakeProvider instances sharing the `calls` log."""

    def _make(name, result=None, exc=None, delay=0):
        return FakeProvider(name, calls, result=result, exc=exc, delay=delay)

    return _make


@pytest.fixture
def image_factory():
    return make_image_b64
