"""Google Veo video synthesis via the Gemini API."""

import asyncio
import logging
import time
from typing import Any, Optional

import requests
from google.genai import types

from ..exceptions import (
    EmptyResponseError,
    GatewayError,
    GenerationCancelledError,
    GenerationTimeoutError,
)
from ..models import Asset
from .client import GeminiService

logger = logging.getLogger(__name__)

VIDEO_ASPECT_RATIOS = ("16:9", "9:16")


def video_aspect_ratio(aspect_ratio: str) -> str:
    """Map an image aspect ratio to the closest one Veo supports."""
    if aspect_ratio in VIDEO_ASPECT_RATIOS:
        return aspect_ratio
    try:
        width, height = (float(x) for x in aspect_ratio.split(":"))
    except ValueError:
        return "16:9"
    return "9:16" if height > width else "16:9"


class VeoClient(GeminiService):
    """Client wrapper for Veo video generation.

    This client handles:
    - Submitting video generation requests
    - Polling the long-running operation within a bounded budget
    - Honouring a cancellation event between polls
    - Downloading the finished video with the API key appended
    """

    DOWNLOAD_TIMEOUT = 120.0  # seconds

    @property
    def model(self) -> str:
        return self._config.video_model

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        cancel: Optional[asyncio.Event] = None,
    ) -> Asset:
        """Generate a video clip from a prompt.

        Args:
            prompt: Text description of the video to generate.
            aspect_ratio: Requested aspect ratio; mapped to 16:9 or 9:16.
            cancel: Event that aborts polling when set.

        Returns:
            The downloaded video.

        Raises:
            GenerationTimeoutError: If polling exceeds the configured budget.
            GenerationCancelledError: If ``cancel`` is set while polling.
            EmptyResponseError: If the finished operation has no video URI.
            GatewayError: If submission, polling or download fails.
        """
        client = self._client()
        ratio = video_aspect_ratio(aspect_ratio)
        logger.info(f"Starting Veo generation with {self.model} ({ratio}): {prompt[:50]}...")

        try:
            operation = await client.aio.models.generate_videos(
                model=self.model,
                prompt=prompt,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    aspect_ratio=ratio,
                    resolution=self._config.video_resolution,
                ),
            )
        except Exception as e:
            raise self._translate_error(e, "Video submission") from e

        operation = await self._poll_operation(client, operation, cancel)
        uri = self._video_uri(operation)
        return await self._download(uri)

    async def _poll_operation(
        self,
        client: Any,
        operation: Any,
        cancel: Optional[asyncio.Event],
    ) -> Any:
        """Poll an operation until done, cancelled or out of budget."""
        name = getattr(operation, "name", None) or "video-operation"
        start_time = time.monotonic()
        poll_count = 0

        while not operation.done:
            elapsed = time.monotonic() - start_time
            if (
                poll_count >= self._config.video_max_poll_attempts
                or elapsed > self._config.video_max_poll_time
            ):
                logger.warning(f"Operation {name} timed out after {poll_count} polls ({elapsed:.1f}s)")
                raise GenerationTimeoutError(name, poll_count, elapsed)

            await self._wait(name, cancel)
            poll_count += 1
            logger.debug(f"Polling operation (attempt {poll_count}): {name}")

            try:
                operation = await client.aio.operations.get(operation)
            except Exception as e:
                raise self._translate_error(e, "Video polling") from e

        error = getattr(operation, "error", None)
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.error(f"Operation {name} failed: {message}")
            raise GatewayError(f"Video generation failed: {message}")

        logger.info(f"Operation {name} completed after {poll_count} polls")
        return operation

    async def _wait(self, name: str, cancel: Optional[asyncio.Event]) -> None:
        interval = self._config.video_poll_interval
        if cancel is None:
            await asyncio.sleep(interval)
            return
        if cancel.is_set():
            raise GenerationCancelledError(name)
        try:
            await asyncio.wait_for(cancel.wait(), timeout=interval)
        except asyncio.TimeoutError:
            return
        logger.info(f"Operation {name} cancelled")
        raise GenerationCancelledError(name)

    @staticmethod
    def _video_uri(operation: Any) -> str:
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        videos = getattr(response, "generated_videos", None) or []
        video = getattr(videos[0], "video", None) if videos else None
        uri = getattr(video, "uri", None)
        if not uri:
            raise EmptyResponseError("Video generation finished but returned no downloadable video.")
        return uri

    async def _download(self, uri: str) -> Asset:
        """Download a generated video. The URI needs the API key appended."""
        api_key = self._api_key()

        def fetch() -> requests.Response:
            response = requests.get(uri, params={"key": api_key}, timeout=self.DOWNLOAD_TIMEOUT)
            response.raise_for_status()
            return response

        try:
            response = await asyncio.to_thread(fetch)
        except requests.RequestException as e:
            logger.error(f"Video download failed: {e}")
            raise GatewayError(f"Failed to fetch video: {e}") from e

        mime_type = response.headers.get("Content-Type", "video/mp4").split(";")[0].strip()
        if not mime_type.startswith("video/"):
            mime_type = "video/mp4"
        logger.info(f"Downloaded video ({len(response.content)} bytes)")
        return Asset(mime_type=mime_type, data=response.content, source_uri=uri)
