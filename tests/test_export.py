"""Tests for asset export."""

import yaml

from director_ai.export import SUMMARY_FILENAME, export_scenes
from director_ai.models import Asset, GenerationOptions, Scene, SceneStatus


def test_export_writes_assets_and_summary(tmp_path):
    scenes = [
        Scene(
            id=1,
            original_sentence="One.",
            expanded_prompt="A grim forest.",
            status=SceneStatus.COMPLETED,
            image_asset=Asset(mime_type="image/png", data=b"png"),
            video_asset=Asset(mime_type="video/mp4", data=b"mp4"),
        ),
        Scene(id=2, original_sentence="Two.", status=SceneStatus.ERROR, error_message="blocked"),
    ]
    output = tmp_path / "out"

    paths = export_scenes(scenes, output, GenerationOptions(style="Anime", aspect_ratio="1:1"))

    assert [p.name for p in paths] == ["image-scene-1.png", "video-scene-1.mp4"]
    assert (output / "image-scene-1.png").read_bytes() == b"png"
    assert (output / "video-scene-1.mp4").read_bytes() == b"mp4"

    summary = yaml.safe_load((output / SUMMARY_FILENAME).read_text())
    assert summary["style"] == "Anime"
    assert summary["completed"] == 1
    assert summary["scenes"][0]["files"] == {"image": "image-scene-1.png", "video": "video-scene-1.mp4"}
    assert summary["scenes"][1]["error_message"] == "blocked"
    assert summary["scenes"][1]["files"] == {}
