"""Scene pipeline orchestration."""

from .controller import ScenePipeline
from .presets import PRESETS, DEFAULT_PRESET, get_preset

__all__ = ["ScenePipeline", "PRESETS", "DEFAULT_PRESET", "get_preset"]
