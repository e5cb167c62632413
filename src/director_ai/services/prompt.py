"""Prompt expansion with the Gemini text model."""

import logging
from typing import AsyncIterator

from ..exceptions import EmptyResponseError, GatewayError
from ..styles import build_expansion_instruction
from .client import GeminiService

logger = logging.getLogger(__name__)


class PromptClient(GeminiService):
    """Expands a short sentence into a detailed generation prompt."""

    @property
    def model(self) -> str:
        return self._config.text_model

    async def expand(self, sentence: str, style: str) -> str:
        """Expand a sentence in one call and return the full prompt.

        Raises:
            EmptyResponseError: If the model returned no text.
            GatewayError: If the call fails.
        """
        instruction = build_expansion_instruction(sentence, style)
        client = self._client()
        logger.info(f"Expanding sentence with {self.model}: {sentence[:50]}...")

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=instruction,
            )
        except Exception as e:
            raise self._translate_error(e, "Prompt expansion") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise EmptyResponseError("Prompt expansion returned no text.")
        return text

    async def expand_stream(self, sentence: str, style: str) -> AsyncIterator[str]:
        """Expand a sentence, yielding text fragments as they arrive.

        Fragments are yielded in receipt order and concatenate to the final
        prompt. Boundaries are arbitrary and may split words; empty chunks
        are skipped. The iterator is single-pass; close it to abandon the
        stream.
        """
        instruction = build_expansion_instruction(sentence, style)
        client = self._client()
        logger.info(f"Streaming expansion with {self.model}: {sentence[:50]}...")

        received = 0
        try:
            stream = await client.aio.models.generate_content_stream(
                model=self.model,
                contents=instruction,
            )
            async for chunk in stream:
                text = getattr(chunk, "text", None)
                if not text:
                    continue
                received += len(text)
                yield text
        except GatewayError:
            raise
        except Exception as e:
            raise self._translate_error(e, "Prompt expansion") from e

        logger.debug(f"Expansion stream finished ({received} chars)")
        if not received:
            raise EmptyResponseError("Prompt expansion returned no text.")
