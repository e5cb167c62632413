"""Generation gateway: the four operations the pipeline needs."""

import asyncio
from typing import AsyncIterator, Optional

from ..config import Config
from ..keys import KeyProvider
from ..models import Asset
from .client import ClientFactory
from .image import ImageClient
from .prompt import PromptClient
from .veo import VeoClient


class GenerationGateway:
    """Facade over the prompt, image and video clients.

    Holds no session state. Each call fetches the key and builds its own SDK
    client. Failures propagate to the caller without retries.
    """

    def __init__(
        self,
        key_provider: Optional[KeyProvider] = None,
        cfg: Optional[Config] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.prompts = PromptClient(key_provider, cfg, client_factory)
        self.images = ImageClient(key_provider, cfg, client_factory)
        self.videos = VeoClient(key_provider, cfg, client_factory)

    async def expand_prompt(self, sentence: str, style: str) -> str:
        return await self.prompts.expand(sentence, style)

    def expand_prompt_stream(self, sentence: str, style: str) -> AsyncIterator[str]:
        return self.prompts.expand_stream(sentence, style)

    async def synthesize_image(self, prompt: str, aspect_ratio: str, style: str) -> Asset:
        return await self.images.generate(prompt, aspect_ratio, style)

    async def edit_asset(self, image: Asset, instruction: str, style: str) -> Asset:
        return await self.images.edit(image, instruction, style)

    async def synthesize_video(
        self,
        prompt: str,
        aspect_ratio: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> Asset:
        return await self.videos.generate(prompt, aspect_ratio, cancel)
