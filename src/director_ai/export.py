"""Write generated scene assets to disk."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from .models import Asset, GenerationOptions, Scene

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "scenes.yaml"


def asset_filename(scene: Scene, asset: Asset) -> str:
    """Return the download filename for a scene asset."""
    kind = "video" if asset.is_video else "image"
    return f"{kind}-scene-{scene.id}.{asset.extension}"


def _write_asset(scene: Scene, asset: Asset, output_dir: Path) -> Path:
    path = output_dir / asset_filename(scene, asset)
    path.write_bytes(asset.data)
    logger.debug(f"Wrote {path} ({len(asset.data)} bytes)")
    return path


def export_scenes(
    scenes: list[Scene],
    output_dir: Path,
    generation: Optional[GenerationOptions] = None,
) -> list[Path]:
    """Save every scene's assets and a YAML summary.

    Args:
        scenes: Scenes to export.
        output_dir: Directory to write into (created if needed).
        generation: Run options recorded in the summary.

    Returns:
        Paths of the asset files written, in scene order.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    entries = []

    for scene in scenes:
        files = {}
        for kind, asset in (("image", scene.image_asset), ("video", scene.video_asset)):
            if asset is None:
                continue
            path = _write_asset(scene, asset, output_dir)
            written.append(path)
            files[kind] = path.name

        entries.append({
            "id": scene.id,
            "original_sentence": scene.original_sentence,
            "expanded_prompt": scene.expanded_prompt,
            "status": scene.status.value,
            "error_message": scene.error_message,
            "files": files,
        })

    summary = {
        "generated_at": datetime.now().isoformat(),
        "style": generation.style if generation else None,
        "aspect_ratio": generation.aspect_ratio if generation else None,
        "completed": sum(1 for e in entries if e["status"] == "completed"),
        "scenes": entries,
    }
    with open(output_dir / SUMMARY_FILENAME, "w") as f:
        yaml.safe_dump(summary, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Exported {len(written)} assets to {output_dir}")
    return written
