"""CLI entry point for Director.AI."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from . import __version__
from .config import config
from .exceptions import DirectorError, InputValidationError, InvalidConfigError
from .export import export_scenes
from .keys import PromptKeyProvider
from .models import Asset, GenerationOptions, Scene, SceneStatus
from .pipeline import DEFAULT_PRESET, PRESETS, ScenePipeline, get_preset
from .services import GenerationGateway
from .styles import STYLE_DIRECTIVES

app = typer.Typer(
    name="director-ai",
    help="Turn two sentences into AI-generated scenes",
    no_args_is_help=True
)

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}

STATUS_ICONS = {
    SceneStatus.IDLE: "⏳",
    SceneStatus.EXPANDING: "✍️ ",
    SceneStatus.SYNTHESIZING: "🎨",
    SceneStatus.REFINING: "🪄",
    SceneStatus.COMPLETED: "✅",
    SceneStatus.ERROR: "❌",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"director-ai version {__version__}")
        raise typer.Exit()


class ProgressPrinter:
    """Prints scene transitions as the pipeline emits updates."""

    def __init__(self) -> None:
        self._seen: dict[int, tuple] = {}

    def __call__(self, scenes: list[Scene]) -> None:
        for scene in scenes:
            key = (scene.status, scene.is_video_loading, scene.video_asset is not None)
            if self._seen.get(scene.id) == key:
                continue
            self._seen[scene.id] = key
            typer.echo(f"   {STATUS_ICONS[scene.status]} Scene {scene.id}: {self._describe(scene)}")

    @staticmethod
    def _describe(scene: Scene) -> str:
        if scene.is_video_loading:
            return "animating video..."
        if scene.status == SceneStatus.SYNTHESIZING and scene.expanded_prompt:
            preview = scene.expanded_prompt[:70] + "..." if len(scene.expanded_prompt) > 70 else scene.expanded_prompt
            return f"synthesizing → {preview}"
        if scene.status == SceneStatus.ERROR:
            return scene.error_message or "failed"
        return scene.status.value


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Director.AI - Generate scenes from sentences using AI."""
    pass


async def _produce(
    pipeline: ScenePipeline,
    sentences: list[str],
    generation: GenerationOptions,
    nudge: Optional[str],
    video: bool,
) -> None:
    await pipeline.run(sentences, generation)
    if pipeline.error:
        return

    if nudge:
        typer.echo(f"\n🪄 Applying nudge: {nudge}")
        for scene in pipeline.scenes:
            pipeline.set_refinement_instruction(scene.id, nudge)
            await pipeline.refine_asset(scene.id)

    if video and not pipeline.options.synthesizes_video:
        typer.echo("\n🎥 Generating video clips (this can take a few minutes)")
        for scene in pipeline.scenes:
            await pipeline.generate_video(scene.id)


@app.command()
def run(
    sentence1: str = typer.Argument(..., help="First sentence of the script"),
    sentence2: str = typer.Argument(..., help="Second sentence of the script"),
    style: str = typer.Option(
        config.default_style,
        "--style",
        "-s",
        help="Visual style (see 'director-ai styles')"
    ),
    aspect_ratio: str = typer.Option(
        config.default_aspect_ratio,
        "--aspect-ratio",
        "-a",
        help="Aspect ratio (1:1, 16:9, 9:16, 4:3, 3:4)"
    ),
    preset: str = typer.Option(
        DEFAULT_PRESET,
        "--preset",
        "-p",
        help="Pipeline preset (see 'director-ai presets')"
    ),
    stream: Optional[bool] = typer.Option(
        None,
        "--stream/--no-stream",
        help="Override whether prompt expansion is streamed"
    ),
    video: bool = typer.Option(
        False,
        "--video",
        help="Also animate each scene into a video clip"
    ),
    nudge: Optional[str] = typer.Option(
        None,
        "--nudge",
        "-n",
        help="Refinement instruction applied to every generated image"
    ),
    output: Path = typer.Option(
        config.workspace / "scenes",
        "--output",
        "-o",
        help="Output directory for generated assets"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Expand two sentences into prompts and render a scene for each."""
    setup_logging(verbose)

    try:
        options = get_preset(preset)
    except InvalidConfigError as e:
        typer.echo(f"❌ {e} (available: {', '.join(PRESETS)})")
        raise typer.Exit(1)

    if stream is not None:
        options.streaming_enabled = stream
    if video:
        options.video_enabled = True

    try:
        generation = GenerationOptions(style=style, aspect_ratio=aspect_ratio)
    except ValidationError as e:
        typer.echo(f"❌ Invalid options: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    typer.echo(f"🎬 Producing 2 scenes ({PRESETS[preset.strip().lower()]['name']} preset)")
    typer.echo(f"   Style: {generation.style}")
    typer.echo(f"   Aspect ratio: {generation.aspect_ratio}")

    key_provider = PromptKeyProvider()
    gateway = GenerationGateway(key_provider)
    pipeline = ScenePipeline(gateway, key_provider, options, on_update=ProgressPrinter())

    try:
        asyncio.run(_produce(pipeline, [sentence1, sentence2], generation, nudge, video))
    except InputValidationError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    if any(scene.image_asset or scene.video_asset for scene in pipeline.scenes):
        paths = export_scenes(pipeline.scenes, output, generation)
        typer.echo(f"\n📁 Saved {len(paths)} assets to {output}")
        for path in paths:
            typer.echo(f"   • {path.name}")

    if pipeline.error:
        typer.echo(f"\n❌ Production halted: {pipeline.error}")
        raise typer.Exit(1)

    failed = [scene for scene in pipeline.scenes if scene.status == SceneStatus.ERROR]
    if failed:
        for scene in failed:
            typer.echo(f"⚠️  Scene {scene.id}: {scene.error_message}")
        raise typer.Exit(1)

    typer.echo("\n✅ Sequence complete")


@app.command()
def refine(
    image: Path = typer.Argument(
        ...,
        help="Image file to refine",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    instruction: str = typer.Argument(..., help="What to change in the image"),
    style: str = typer.Option(
        config.default_style,
        "--style",
        "-s",
        help="Visual style"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output image path (defaults to <image>-refined.<ext>)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Apply a nudge instruction to an existing image."""
    setup_logging(verbose)

    if not instruction.strip():
        typer.echo("❌ Instruction must not be empty")
        raise typer.Exit(1)

    mime_type = IMAGE_MIME_TYPES.get(image.suffix.lower())
    if mime_type is None:
        typer.echo(f"❌ Unsupported image type: {image.suffix}")
        raise typer.Exit(1)

    typer.echo(f"🪄 Refining {image.name}: {instruction}")
    gateway = GenerationGateway(PromptKeyProvider())
    source = Asset(mime_type=mime_type, data=image.read_bytes())

    try:
        result = asyncio.run(gateway.edit_asset(source, instruction.strip(), style))
    except DirectorError as e:
        typer.echo(f"❌ Refinement failed: {e}")
        raise typer.Exit(1)

    target = output or image.with_name(f"{image.stem}-refined.{result.extension}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.data)
    typer.echo(f"✅ Image saved: {target}")


@app.command()
def styles() -> None:
    """List the built-in visual styles."""
    typer.echo("🎨 Styles:")
    for name, directive in STYLE_DIRECTIVES.items():
        typer.echo(f"   • {name}")
        typer.echo(f"     {directive}")


@app.command()
def presets() -> None:
    """List the pipeline presets."""
    typer.echo("🧩 Presets:")
    for key, preset in PRESETS.items():
        marker = " (default)" if key == DEFAULT_PRESET else ""
        typer.echo(f"   • {key}{marker}: {preset['description']}")
