"""Scene data model."""

import base64
import binascii
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/webp": "webp",
    "video/mp4": "mp4",
}


class SceneStatus(str, Enum):
    """Pipeline stage a scene is in."""
    IDLE = "idle"
    EXPANDING = "expanding"
    SYNTHESIZING = "synthesizing"
    REFINING = "refining"
    COMPLETED = "completed"
    ERROR = "error"


class Asset(BaseModel):
    """A generated image or video held in memory."""

    mime_type: str = Field(..., description="MIME type, e.g. 'image/png'")
    data: bytes = Field(..., description="Raw asset bytes")
    source_uri: Optional[str] = Field(None, description="Remote URI the asset was fetched from")

    @classmethod
    def from_base64(cls, data: str, mime_type: str = "image/png") -> "Asset":
        """Build an asset from base64 text as returned inline by the API."""
        return cls(mime_type=mime_type, data=base64.b64decode(data))

    @classmethod
    def from_data_uri(cls, uri: str) -> "Asset":
        """Parse a ``data:<mime>;base64,<payload>`` URI."""
        if not uri.startswith("data:") or "," not in uri:
            raise ValueError(f"Not a data URI: {uri[:40]}")
        header, payload = uri[5:].split(",", 1)
        mime_type = header.split(";")[0] or "image/png"
        try:
            return cls(mime_type=mime_type, data=base64.b64decode(payload, validate=True))
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload in data URI: {e}") from e

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @property
    def extension(self) -> str:
        """File suffix (without dot) for this asset's MIME type."""
        if self.mime_type in _EXTENSIONS:
            return _EXTENSIONS[self.mime_type]
        return self.mime_type.split("/")[-1] or "bin"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class Scene(BaseModel):
    """One unit of work derived from one input sentence."""

    id: int = Field(..., description="1-based scene identifier", gt=0)
    original_sentence: str = Field(..., description="Input sentence, verbatim")
    expanded_prompt: Optional[str] = Field(None, description="Prompt produced by expansion")
    refinement_instruction: str = Field(default="", description="Pending nudge for the image")
    image_asset: Optional[Asset] = Field(None, description="Generated image")
    video_asset: Optional[Asset] = Field(None, description="Generated video")
    status: SceneStatus = Field(default=SceneStatus.IDLE, description="Current stage")
    error_message: Optional[str] = Field(None, description="Last failure, if any")
    is_video_loading: bool = Field(default=False, description="Video synthesis in progress")

    @property
    def is_busy(self) -> bool:
        return self.is_video_loading or self.status in (
            SceneStatus.EXPANDING,
            SceneStatus.SYNTHESIZING,
            SceneStatus.REFINING,
        )
