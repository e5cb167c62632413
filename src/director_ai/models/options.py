"""Run and pipeline options."""

from pydantic import BaseModel, Field, field_validator, model_validator

IMAGE_ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")


class GenerationOptions(BaseModel):
    """Per-run creative choices."""

    style: str = Field(..., description="Visual style name")
    aspect_ratio: str = Field(default="16:9", description="Output aspect ratio")

    @field_validator("style")
    @classmethod
    def _style_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("style must not be empty")
        return value

    @field_validator("aspect_ratio")
    @classmethod
    def _known_aspect_ratio(cls, value: str) -> str:
        if value not in IMAGE_ASPECT_RATIOS:
            raise ValueError(
                f"Invalid aspect_ratio: {value}. Must be one of {', '.join(IMAGE_ASPECT_RATIOS)}"
            )
        return value


class PipelineOptions(BaseModel):
    """Which stages and actions a pipeline supports."""

    expansion_enabled: bool = Field(default=True, description="Expand sentences with a text model")
    streaming_enabled: bool = Field(default=True, description="Stream expansion text chunk by chunk")
    image_enabled: bool = Field(default=True, description="Synthesis stage produces an image")
    video_enabled: bool = Field(default=False, description="Video synthesis is available")
    edit_enabled: bool = Field(default=True, description="Images can be refined with a nudge")

    @model_validator(mode="after")
    def _needs_a_synthesis_stage(self) -> "PipelineOptions":
        if not (self.image_enabled or self.video_enabled):
            raise ValueError("At least one of image_enabled or video_enabled must be set")
        return self

    @property
    def synthesizes_video(self) -> bool:
        """True when the synthesis stage itself produces a video."""
        return self.video_enabled and not self.image_enabled
