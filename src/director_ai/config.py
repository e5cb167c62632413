"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_api_key() -> str:
    """Return the first Gemini API key found in the environment."""
    for name in ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY"):
        value = os.getenv(name, "")
        if value:
            return value
    return ""


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    gemini_api_key: str = Field(
        default_factory=_env_api_key,
        description="Gemini API key (GEMINI_API_KEY, API_KEY or GOOGLE_API_KEY)"
    )

    # Models
    text_model: str = Field(
        default_factory=lambda: os.getenv("DIRECTOR_TEXT_MODEL", "gemini-3-flash-preview"),
        description="Model used to expand sentences into prompts"
    )
    image_model: str = Field(
        default_factory=lambda: os.getenv("DIRECTOR_IMAGE_MODEL", "gemini-2.5-flash-image"),
        description="Model used for image synthesis and edits"
    )
    video_model: str = Field(
        default_factory=lambda: os.getenv("DIRECTOR_VIDEO_MODEL", "veo-3.1-fast-generate-preview"),
        description="Veo model used for video synthesis"
    )

    # Video polling
    video_resolution: str = Field(default="720p", description="Veo output resolution")
    video_poll_interval: float = Field(
        default_factory=lambda: float(os.getenv("DIRECTOR_VIDEO_POLL_INTERVAL", "10")),
        description="Seconds between video operation polls",
        gt=0,
    )
    video_max_poll_attempts: int = Field(
        default_factory=lambda: int(os.getenv("DIRECTOR_VIDEO_MAX_POLLS", "60")),
        description="Maximum number of video operation polls",
        gt=0,
    )
    video_max_poll_time: float = Field(
        default_factory=lambda: float(os.getenv("DIRECTOR_VIDEO_MAX_POLL_TIME", "600")),
        description="Maximum seconds to wait for a video operation",
        gt=0,
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("DIRECTOR_WORKSPACE", ".")),
        description="Workspace directory"
    )

    # Defaults
    default_style: str = Field(default="Noir Horror", description="Default visual style")
    default_aspect_ratio: str = Field(default="16:9", description="Default aspect ratio")

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY not set")

    def reload_api_key(self) -> str:
        """Re-read the API key from the environment and ``.env``."""
        load_dotenv(override=True)
        self.gemini_api_key = _env_api_key()
        return self.gemini_api_key


# Global config instance
config = Config()
