"""External service integrations."""

from .client import GeminiService
from .gateway import GenerationGateway
from .image import ImageClient
from .prompt import PromptClient
from .veo import VeoClient, video_aspect_ratio

__all__ = [
    "GeminiService",
    "GenerationGateway",
    "ImageClient",
    "PromptClient",
    "VeoClient",
    "video_aspect_ratio",
]
