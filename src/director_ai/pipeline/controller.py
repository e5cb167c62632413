"""
Scene pipeline controller.

Drives each scene through expansion and synthesis, one scene at a time,
and exposes the follow-up actions a user can trigger on a finished scene
(regenerate, refine, animate). Every state change is pushed to an optional
``on_update`` listener so a front-end can re-render progressively.
"""

import asyncio
import logging
from typing import Callable, Optional, Sequence

from ..config import config
from ..exceptions import (
    CredentialError,
    EmptyResponseError,
    InputValidationError,
    error_message_for,
)
from ..keys import EnvKeyProvider, KeyProvider
from ..models import GenerationOptions, PipelineOptions, Scene, SceneStatus
from ..services import GenerationGateway

logger = logging.getLogger(__name__)

UpdateListener = Callable[[list[Scene]], None]

MISSING_INPUT_MESSAGE = "Please provide both sentences to begin the workflow."
SCENE_COUNT = 2
SCENE_COUNT_MESSAGE = f"Exactly {SCENE_COUNT} sentences are required."


class ScenePipeline:
    """Owns the scene list for a session and mutates it in response to gateway results.

    Usage:
        pipeline = ScenePipeline(GenerationGateway(), on_update=render)
        await pipeline.run(["A door creaks.", "Nobody is there."],
                           GenerationOptions(style="Noir Horror"))
        await pipeline.refine_asset(1, "make it rain")
    """

    def __init__(
        self,
        gateway: GenerationGateway,
        key_provider: Optional[KeyProvider] = None,
        options: Optional[PipelineOptions] = None,
        on_update: Optional[UpdateListener] = None,
    ) -> None:
        self._gateway = gateway
        self._key_provider = key_provider or EnvKeyProvider()
        self.options = options or PipelineOptions()
        self._on_update = on_update
        self._video_cancels: dict[int, asyncio.Event] = {}

        self.scenes: list[Scene] = []
        self.error: Optional[str] = None
        self.is_processing = False
        self.generation: Optional[GenerationOptions] = None

    # ── Helpers ──────────────────────────────────────────────────────────

    def _emit(self) -> None:
        if self._on_update:
            self._on_update([scene.model_copy(deep=True) for scene in self.scenes])

    def get_scene(self, scene_id: int) -> Optional[Scene]:
        return next((s for s in self.scenes if s.id == scene_id), None)

    def _update(self, scene_id: int, **changes) -> None:
        scene = self.get_scene(scene_id)
        if scene is None:
            return
        for name, value in changes.items():
            setattr(scene, name, value)
        self._emit()

    def _fail(self, scene_id: int, exc: Exception, **changes) -> str:
        message = error_message_for(exc)
        logger.error(f"Scene {scene_id} failed: {message}")
        if isinstance(exc, CredentialError):
            # The new key is used as soon as it is provided; it is not verified.
            self._key_provider.request_key()
        self._update(scene_id, status=SceneStatus.ERROR, error_message=message, **changes)
        return message

    def _current_generation(self) -> GenerationOptions:
        return self.generation or GenerationOptions(
            style=config.default_style,
            aspect_ratio=config.default_aspect_ratio,
        )

    # ── Full run ─────────────────────────────────────────────────────────

    async def run(
        self,
        sentences: Sequence[str],
        generation: GenerationOptions,
    ) -> list[Scene]:
        """Create one scene per sentence and process them in order.

        The first failure marks its scene as errored, sets the run-level
        ``error`` and stops; later scenes keep their last status. A call
        made while another run or action is in flight is a no-op and
        returns the current scenes.

        Raises:
            InputValidationError: If there are not exactly two sentences or
                any sentence is empty. No scene is created and no gateway
                call is made.
        """
        if self.is_processing:
            logger.debug("Run skipped; pipeline is busy")
            return self.scenes

        if len(sentences) != SCENE_COUNT:
            self.error = SCENE_COUNT_MESSAGE
            raise InputValidationError(SCENE_COUNT_MESSAGE, {"count": len(sentences)})
        if any(not s.strip() for s in sentences):
            self.error = MISSING_INPUT_MESSAGE
            raise InputValidationError(MISSING_INPUT_MESSAGE)

        if not self._key_provider.has_key():
            logger.info("No API key available; requesting one")
            self._key_provider.request_key()

        self.generation = generation
        self.error = None
        self.scenes = [
            Scene(id=index, original_sentence=sentence)
            for index, sentence in enumerate(sentences, start=1)
        ]
        self.is_processing = True
        logger.info(f"Starting run with {len(self.scenes)} scenes (style: {generation.style})")
        self._emit()

        try:
            for scene in self.scenes:
                try:
                    await self._process_scene(scene, generation)
                except Exception as e:
                    self.error = error_message_for(e)
                    self._fail(scene.id, e)
                    logger.warning(f"Run halted at scene {scene.id}")
                    break
        finally:
            self.is_processing = False
            self._emit()

        return self.scenes

    async def _process_scene(self, scene: Scene, generation: GenerationOptions) -> None:
        await self._expand(scene, generation)

        self._update(scene.id, status=SceneStatus.SYNTHESIZING)
        if self.options.synthesizes_video:
            asset = await self._synthesize_video(scene, generation)
            self._update(scene.id, video_asset=asset, status=SceneStatus.COMPLETED)
        else:
            asset = await self._gateway.synthesize_image(
                scene.expanded_prompt, generation.aspect_ratio, generation.style
            )
            self._update(scene.id, image_asset=asset, status=SceneStatus.COMPLETED)
        logger.info(f"Scene {scene.id} completed")

    async def _expand(self, scene: Scene, generation: GenerationOptions) -> None:
        self._update(scene.id, status=SceneStatus.EXPANDING, error_message=None)

        if not self.options.expansion_enabled:
            self._update(scene.id, expanded_prompt=scene.original_sentence.strip())
            return

        if self.options.streaming_enabled:
            stream = self._gateway.expand_prompt_stream(scene.original_sentence, generation.style)
            try:
                async for delta in stream:
                    if not delta:
                        continue
                    self._update(scene.id, expanded_prompt=(scene.expanded_prompt or "") + delta)
            finally:
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    await aclose()
        else:
            text = await self._gateway.expand_prompt(scene.original_sentence, generation.style)
            self._update(scene.id, expanded_prompt=text)

        if not (scene.expanded_prompt or "").strip():
            raise EmptyResponseError("Prompt expansion returned no text.")

    async def _synthesize_video(self, scene: Scene, generation: GenerationOptions):
        cancel = asyncio.Event()
        self._video_cancels[scene.id] = cancel
        try:
            return await self._gateway.synthesize_video(
                scene.expanded_prompt, generation.aspect_ratio, cancel=cancel
            )
        finally:
            self._video_cancels.pop(scene.id, None)

    # ── User edits ───────────────────────────────────────────────────────

    def set_expanded_prompt(self, scene_id: int, text: str) -> None:
        """Replace a scene's prompt with user-edited text."""
        self._update(scene_id, expanded_prompt=text)

    def set_refinement_instruction(self, scene_id: int, text: str) -> None:
        self._update(scene_id, refinement_instruction=text)

    # ── User-triggered stages ────────────────────────────────────────────

    async def regenerate_image(self, scene_id: int) -> None:
        """Re-run image synthesis for one scene with its current prompt.

        No-op unless the scene exists, has a prompt and images are enabled,
        and nothing else is in flight. Failures stay on the scene; the
        run-level error is left alone.
        """
        scene = self.get_scene(scene_id)
        if (
            scene is None
            or self.is_processing
            or scene.is_busy
            or not self.options.image_enabled
            or not (scene.expanded_prompt or "").strip()
        ):
            logger.debug(f"Regenerate skipped for scene {scene_id}")
            return

        generation = self._current_generation()
        self.is_processing = True
        self._update(scene_id, status=SceneStatus.SYNTHESIZING, error_message=None)
        try:
            asset = await self._gateway.synthesize_image(
                scene.expanded_prompt, generation.aspect_ratio, generation.style
            )
        except Exception as e:
            self._fail(scene_id, e)
            return
        finally:
            self.is_processing = False
        self._update(scene_id, image_asset=asset, status=SceneStatus.COMPLETED)

    async def refine_asset(self, scene_id: int, instruction: Optional[str] = None) -> None:
        """Apply a nudge to a scene's image.

        Uses ``instruction`` or, if omitted, the scene's pending
        ``refinement_instruction``. No-op without an image or instruction.
        """
        scene = self.get_scene(scene_id)
        if scene is None or self.is_processing or scene.is_busy or not self.options.edit_enabled:
            logger.debug(f"Refine skipped for scene {scene_id}")
            return
        if instruction is None:
            instruction = scene.refinement_instruction
        instruction = instruction.strip()
        if scene.image_asset is None or not instruction:
            logger.debug(f"Refine skipped for scene {scene_id}")
            return

        generation = self._current_generation()
        self.is_processing = True
        self._update(scene_id, status=SceneStatus.REFINING, error_message=None)
        try:
            asset = await self._gateway.edit_asset(scene.image_asset, instruction, generation.style)
        except Exception as e:
            self._fail(scene_id, e)
            return
        finally:
            self.is_processing = False
        self._update(
            scene_id,
            image_asset=asset,
            refinement_instruction="",
            status=SceneStatus.COMPLETED,
        )

    async def generate_video(self, scene_id: int) -> None:
        """Animate a scene's prompt into a video clip.

        Progress is tracked with ``is_video_loading``, independent of
        ``status``. The flag is cleared whether the call succeeds or fails.
        """
        scene = self.get_scene(scene_id)
        if (
            scene is None
            or not self.options.video_enabled
            or self.is_processing
            or scene.is_busy
            or not (scene.expanded_prompt or "").strip()
        ):
            logger.debug(f"Video generation skipped for scene {scene_id}")
            return

        generation = self._current_generation()
        self._update(scene_id, is_video_loading=True, error_message=None)
        try:
            asset = await self._synthesize_video(scene, generation)
        except Exception as e:
            self._fail(scene_id, e, is_video_loading=False)
            return
        self._update(
            scene_id,
            video_asset=asset,
            is_video_loading=False,
            status=SceneStatus.COMPLETED,
        )

    def cancel_video(self, scene_id: int) -> bool:
        """Stop polling an in-flight video job. Returns False if none is running."""
        cancel = self._video_cancels.get(scene_id)
        if cancel is None:
            return False
        logger.info(f"Cancelling video generation for scene {scene_id}")
        cancel.set()
        return True
