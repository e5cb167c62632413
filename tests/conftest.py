"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

import asyncio
from typing import Optional

import pytest

from director_ai.config import Config
from director_ai.exceptions import GenerationCancelledError
from director_ai.keys import StaticKeyProvider
from director_ai.models import Asset, GenerationOptions, PipelineOptions
from director_ai.pipeline import ScenePipeline


def image(label: str) -> Asset:
    return Asset(mime_type="image/png", data=label.encode())


def video(label: str) -> Asset:
    return Asset(mime_type="video/mp4", data=label.encode())


class FakeGateway:
    """Scripted stand-in for GenerationGateway.

    Each ``*_results`` list is consumed front to back; an Exception entry
    is raised instead of returned. When a list runs dry a default asset is
    produced.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.stream_chunks: list[str] = ["A ", "grim ", "forest."]
        self.expand_error: Optional[Exception] = None
        self.image_results: list = []
        self.edit_results: list = []
        self.video_results: list = []
        self.block_video = False
        # When set, the image call numbered ``hold_image_call`` waits for it.
        self.image_release: Optional[asyncio.Event] = None
        self.hold_image_call = 0

    @staticmethod
    def _next(results: list, default):
        result = results.pop(0) if results else default
        if isinstance(result, Exception):
            raise result
        return result

    async def expand_prompt(self, sentence: str, style: str) -> str:
        self.calls.append(("expand", sentence, style))
        if self.expand_error:
            raise self.expand_error
        return f"Expanded: {sentence}"

    def expand_prompt_stream(self, sentence: str, style: str):
        self.calls.append(("expand_stream", sentence, style))
        return self._stream()

    async def _stream(self):
        if self.expand_error:
            raise self.expand_error
        for chunk in self.stream_chunks:
            yield chunk

    async def synthesize_image(self, prompt: str, aspect_ratio: str, style: str) -> Asset:
        self.calls.append(("image", prompt, aspect_ratio, style))
        if self.image_release and self.call_kinds().count("image") == self.hold_image_call:
            await self.image_release.wait()
        return self._next(self.image_results, image(f"image-{len(self.calls)}"))

    async def edit_asset(self, asset: Asset, instruction: str, style: str) -> Asset:
        self.calls.append(("edit", asset.data, instruction, style))
        return self._next(self.edit_results, image("edited"))

    async def synthesize_video(self, prompt: str, aspect_ratio: str, cancel=None) -> Asset:
        self.calls.append(("video", prompt, aspect_ratio))
        if self.block_video:
            await cancel.wait()
            raise GenerationCancelledError("fake-operation")
        await asyncio.sleep(0)
        return self._next(self.video_results, video("clip"))

    def call_kinds(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def key_provider() -> StaticKeyProvider:
    return StaticKeyProvider("test-key")


@pytest.fixture
def generation() -> GenerationOptions:
    return GenerationOptions(style="Noir Horror", aspect_ratio="16:9")


@pytest.fixture
def updates() -> list:
    return []


@pytest.fixture
def make_pipeline(gateway, key_provider, updates):
    """Build a pipeline around the fake gateway, recording every update."""

    def _make(**option_overrides) -> ScenePipeline:
        options = PipelineOptions(**option_overrides)
        return ScenePipeline(gateway, key_provider, options, on_update=updates.append)

    return _make


@pytest.fixture
def test_config() -> Config:
    return Config(
        gemini_api_key="test-key",
        video_poll_interval=0.001,
        video_max_poll_attempts=5,
        video_max_poll_time=5.0,
    )
