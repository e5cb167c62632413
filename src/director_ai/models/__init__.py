"""Data models for Director.AI."""

from .scene import Asset, Scene, SceneStatus
from .options import GenerationOptions, PipelineOptions, IMAGE_ASPECT_RATIOS

__all__ = [
    "Asset",
    "Scene",
    "SceneStatus",
    "GenerationOptions",
    "PipelineOptions",
    "IMAGE_ASPECT_RATIOS",
]
