"""Gemini image synthesis and editing."""

import logging

from google.genai import types

from ..models import Asset
from .client import GeminiService

logger = logging.getLogger(__name__)


class ImageClient(GeminiService):
    """Client wrapper for Gemini image generation and edits."""

    @property
    def model(self) -> str:
        return self._config.image_model

    async def generate(self, prompt: str, aspect_ratio: str, style: str) -> Asset:
        """Generate an image from an expanded prompt.

        Args:
            prompt: Expanded prompt text.
            aspect_ratio: Image aspect ratio ('1:1', '16:9', '9:16', '4:3', '3:4').
            style: Visual style, prefixed to the prompt.

        Returns:
            The generated image.

        Raises:
            ContentPolicyError: If the request was blocked by safety filters.
            EmptyResponseError: If no image came back.
            GatewayError: If the call fails.
        """
        client = self._client()
        logger.info(f"Generating image with {self.model} ({aspect_ratio}): {prompt[:50]}...")

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=f"{style}. {prompt}",
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            )
        except Exception as e:
            raise self._translate_error(e, "Image generation") from e

        asset = self._extract_image(
            response,
            refused_message="The visual asset was blocked by safety filters. Please simplify the text.",
            failed_message="Image generation failed.",
        )
        logger.info(f"Received image ({asset.mime_type}, {len(asset.data)} bytes)")
        return asset

    async def edit(self, image: Asset, instruction: str, style: str) -> Asset:
        """Apply a nudge instruction to an existing image.

        Raises:
            ContentPolicyError: If the request was blocked by safety filters.
            EmptyResponseError: If no image came back.
            GatewayError: If the call fails.
        """
        client = self._client()
        logger.info(f"Refining image with {self.model}: {instruction[:50]}...")

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[self._image_part(image), f"{style}. {instruction}"],
            )
        except Exception as e:
            raise self._translate_error(e, "Image refinement") from e

        return self._extract_image(
            response,
            refused_message="Blocked by filters. Try a simpler request.",
            failed_message="Refinement failed.",
        )
