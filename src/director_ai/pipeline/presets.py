"""
Preset library: named pipeline configurations.

Each preset reproduces one flavour of the app, from the full director
workflow to a single-call economy run.
"""

from ..exceptions import InvalidConfigError
from ..models import PipelineOptions

PRESETS = {
    "director": {
        "name": "Director",
        "description": "Streamed prompts, images, nudges and on-demand video",
        "options": PipelineOptions(
            expansion_enabled=True,
            streaming_enabled=True,
            image_enabled=True,
            video_enabled=True,
            edit_enabled=True,
        ),
    },
    "studio": {
        "name": "Asset Studio",
        "description": "Streamed prompts, images and nudges",
        "options": PipelineOptions(
            expansion_enabled=True,
            streaming_enabled=True,
            image_enabled=True,
            video_enabled=False,
            edit_enabled=True,
        ),
    },
    "economy": {
        "name": "Economy",
        "description": "One expansion call and one image per scene",
        "options": PipelineOptions(
            expansion_enabled=True,
            streaming_enabled=False,
            image_enabled=True,
            video_enabled=False,
            edit_enabled=True,
        ),
    },
    "motion": {
        "name": "Motion",
        "description": "Expanded prompts rendered straight to video",
        "options": PipelineOptions(
            expansion_enabled=True,
            streaming_enabled=True,
            image_enabled=False,
            video_enabled=True,
            edit_enabled=False,
        ),
    },
}

DEFAULT_PRESET = "director"


def get_preset(name: str) -> PipelineOptions:
    """Return a copy of the options for a preset."""
    preset = PRESETS.get(name.strip().lower())
    if preset is None:
        raise InvalidConfigError(
            f"Unknown preset: '{name}'",
            {"available": sorted(PRESETS)},
        )
    return preset["options"].model_copy()
