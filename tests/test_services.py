"""Tests for the Gemini prompt, image and Veo clients."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from google.genai import errors, types

from director_ai.config import Config
from director_ai.exceptions import (
    ContentPolicyError,
    CredentialError,
    EmptyResponseError,
    GatewayError,
    GenerationCancelledError,
    GenerationTimeoutError,
)
from director_ai.keys import StaticKeyProvider
from director_ai.models import Asset
from director_ai.services import GenerationGateway, video_aspect_ratio
from director_ai.services import veo as veo_module


def _part(data=None, mime_type="image/png", text=None):
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(inline_data=inline, text=text)


def _response(parts=None, finish_reason=types.FinishReason.STOP, candidates=True, block_reason=None):
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    if not candidates:
        return SimpleNamespace(candidates=[], prompt_feedback=feedback)
    candidate = SimpleNamespace(
        finish_reason=finish_reason,
        content=SimpleNamespace(parts=parts or []),
    )
    return SimpleNamespace(candidates=[candidate], prompt_feedback=feedback)


async def _chunks(*texts):
    for text in texts:
        yield SimpleNamespace(text=text)


class FakeClient:
    """Minimal stand-in for google.genai.Client's async surface."""

    def __init__(self):
        self.models = SimpleNamespace(
            generate_content=AsyncMock(),
            generate_content_stream=AsyncMock(),
            generate_videos=AsyncMock(),
        )
        self.operations = SimpleNamespace(get=AsyncMock())
        self.aio = SimpleNamespace(models=self.models, operations=self.operations)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def factory(fake_client):
    return Mock(return_value=fake_client)


@pytest.fixture
def service_gateway(factory, test_config):
    return GenerationGateway(StaticKeyProvider("test-key"), test_config, factory)


class TestPromptClient:

    @pytest.mark.asyncio
    async def test_expand_returns_stripped_text(self, service_gateway, fake_client, factory):
        fake_client.models.generate_content.return_value = SimpleNamespace(text="  A grim forest.\n")

        text = await service_gateway.expand_prompt("A forest.", "Noir Horror")

        assert text == "A grim forest."
        factory.assert_called_once_with("test-key")
        kwargs = fake_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-3-flash-preview"
        assert 'Sentence: "A forest."' in kwargs["contents"]
        assert 'Visual style: "Noir Horror"' in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_expand_empty_text_raises(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = SimpleNamespace(text=None)

        with pytest.raises(EmptyResponseError):
            await service_gateway.expand_prompt("A forest.", "Noir Horror")

    @pytest.mark.asyncio
    async def test_stream_yields_chunks_in_order(self, service_gateway, fake_client):
        fake_client.models.generate_content_stream.return_value = _chunks("A ", None, "grim ", "", "forest.")

        chunks = [c async for c in service_gateway.expand_prompt_stream("A forest.", "Noir Horror")]

        assert chunks == ["A ", "grim ", "forest."]

    @pytest.mark.asyncio
    async def test_stream_without_text_raises(self, service_gateway, fake_client):
        fake_client.models.generate_content_stream.return_value = _chunks(None, "")

        with pytest.raises(EmptyResponseError):
            async for _ in service_gateway.expand_prompt_stream("A forest.", "Noir Horror"):
                pass

    @pytest.mark.asyncio
    async def test_unknown_failure_uses_fallback_message(self, service_gateway, fake_client):
        fake_client.models.generate_content.side_effect = RuntimeError()

        with pytest.raises(GatewayError) as exc_info:
            await service_gateway.expand_prompt("A forest.", "Noir Horror")

        assert str(exc_info.value) == "Production halted due to an internal error."

    @pytest.mark.asyncio
    async def test_missing_key_raises_before_any_call(self, factory, test_config):
        gateway = GenerationGateway(StaticKeyProvider(""), test_config, factory)

        with pytest.raises(CredentialError):
            await gateway.expand_prompt("A forest.", "Noir Horror")

        factory.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,message,expected", [
        (401, "Unauthorized", CredentialError),
        (403, "Permission denied", CredentialError),
        (400, "API key not valid. Please pass a valid API key.", CredentialError),
        (404, "Requested entity was not found.", CredentialError),
        (400, "Invalid argument", GatewayError),
        (500, "Internal error", GatewayError),
    ])
    async def test_api_errors_are_translated(self, service_gateway, fake_client, code, message, expected):
        fake_client.models.generate_content.side_effect = errors.APIError(
            code, {"error": {"code": code, "message": message, "status": "ERROR"}}
        )

        with pytest.raises(GatewayError) as exc_info:
            await service_gateway.expand_prompt("A forest.", "Noir Horror")

        assert type(exc_info.value) is expected
        assert exc_info.value.details["code"] == code
        if expected is GatewayError:
            assert str(exc_info.value) == message


class TestImageClient:

    @pytest.mark.asyncio
    async def test_generate_returns_inline_image(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response(
            [_part(text="Here you go"), _part(data=b"\x89PNG", mime_type="image/png")]
        )

        asset = await service_gateway.synthesize_image("A grim forest.", "9:16", "Noir Horror")

        assert asset == Asset(mime_type="image/png", data=b"\x89PNG")
        kwargs = fake_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash-image"
        assert kwargs["contents"] == "Noir Horror. A grim forest."
        assert kwargs["config"].image_config.aspect_ratio == "9:16"

    @pytest.mark.asyncio
    async def test_safety_finish_reason_is_content_policy(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response(
            finish_reason=types.FinishReason.SAFETY
        )

        with pytest.raises(ContentPolicyError) as exc_info:
            await service_gateway.synthesize_image("A grim forest.", "1:1", "Noir Horror")

        assert "simplify" in str(exc_info.value)
        assert exc_info.value.is_content_block

    @pytest.mark.asyncio
    async def test_blocked_prompt_is_content_policy(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response(
            candidates=False, block_reason=types.BlockedReason.SAFETY
        )

        with pytest.raises(ContentPolicyError):
            await service_gateway.synthesize_image("A grim forest.", "1:1", "Noir Horror")

    @pytest.mark.asyncio
    async def test_text_only_response_quotes_refusal(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response([_part(text="I can't draw that " * 10)])

        with pytest.raises(EmptyResponseError) as exc_info:
            await service_gateway.synthesize_image("A grim forest.", "1:1", "Noir Horror")

        message = str(exc_info.value)
        assert message.startswith("Asset creation failed: I can't draw that")
        assert len(message) == len("Asset creation failed: ") + 80

    @pytest.mark.asyncio
    async def test_no_candidates_is_empty_response(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response(candidates=False)

        with pytest.raises(EmptyResponseError) as exc_info:
            await service_gateway.synthesize_image("A grim forest.", "1:1", "Noir Horror")

        assert str(exc_info.value) == "Image generation failed."

    @pytest.mark.asyncio
    async def test_edit_sends_image_and_instruction(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response([_part(data=b"new", mime_type="image/jpeg")])
        source = Asset(mime_type="image/png", data=b"old")

        asset = await service_gateway.edit_asset(source, "add rain", "Found Footage")

        assert asset.data == b"new"
        assert asset.mime_type == "image/jpeg"
        contents = fake_client.models.generate_content.call_args.kwargs["contents"]
        assert contents[0].inline_data.data == b"old"
        assert contents[0].inline_data.mime_type == "image/png"
        assert contents[1] == "Found Footage. add rain"

    @pytest.mark.asyncio
    async def test_edit_blocked(self, service_gateway, fake_client):
        fake_client.models.generate_content.return_value = _response(
            finish_reason=types.FinishReason.SAFETY
        )

        with pytest.raises(ContentPolicyError) as exc_info:
            await service_gateway.edit_asset(Asset(mime_type="image/png", data=b"old"), "add rain", "Anime")

        assert str(exc_info.value) == "Blocked by filters. Try a simpler request."


def _operation(done, uri=None, error=None):
    videos = [SimpleNamespace(video=SimpleNamespace(uri=uri))] if uri else []
    return SimpleNamespace(
        name="operations/veo-1",
        done=done,
        error=error,
        response=SimpleNamespace(generated_videos=videos) if done else None,
    )


class TestVeoClient:

    @pytest.fixture
    def download(self, monkeypatch):
        calls = []

        def fake_get(url, params=None, timeout=None):
            calls.append((url, params))
            return SimpleNamespace(
                content=b"mp4-bytes",
                headers={"Content-Type": "video/mp4"},
                raise_for_status=lambda: None,
            )

        monkeypatch.setattr(veo_module.requests, "get", fake_get)
        return calls

    @pytest.mark.asyncio
    async def test_polls_until_done_then_downloads(self, service_gateway, fake_client, download):
        uri = "https://generativelanguage.googleapis.com/v1beta/files/abc:download?alt=media"
        fake_client.models.generate_videos.return_value = _operation(False)
        fake_client.operations.get.side_effect = [_operation(False), _operation(True, uri=uri)]

        asset = await service_gateway.synthesize_video("A grim forest.", "1:1")

        assert asset.mime_type == "video/mp4"
        assert asset.data == b"mp4-bytes"
        assert asset.source_uri == uri
        assert fake_client.operations.get.await_count == 2
        assert download == [(uri, {"key": "test-key"})]
        config = fake_client.models.generate_videos.call_args.kwargs["config"]
        assert config.aspect_ratio == "16:9"
        assert config.resolution == "720p"

    @pytest.mark.asyncio
    async def test_times_out_after_max_attempts(self, service_gateway, fake_client, download):
        fake_client.models.generate_videos.return_value = _operation(False)
        fake_client.operations.get.return_value = _operation(False)

        with pytest.raises(GenerationTimeoutError) as exc_info:
            await service_gateway.synthesize_video("A grim forest.", "16:9")

        assert fake_client.operations.get.await_count == 5
        assert exc_info.value.details["attempts"] == 5
        assert download == []

    @pytest.mark.asyncio
    async def test_times_out_after_max_poll_time(self, factory, fake_client, download):
        cfg = Config(
            gemini_api_key="test-key",
            video_poll_interval=0.005,
            video_max_poll_attempts=10_000,
            video_max_poll_time=0.02,
        )
        gateway = GenerationGateway(StaticKeyProvider("test-key"), cfg, factory)
        fake_client.models.generate_videos.return_value = _operation(False)
        fake_client.operations.get.return_value = _operation(False)

        with pytest.raises(GenerationTimeoutError) as exc_info:
            await gateway.synthesize_video("A grim forest.", "16:9")

        attempts = exc_info.value.details["attempts"]
        assert 0 < attempts < 10_000
        assert fake_client.operations.get.await_count == attempts
        assert download == []

    @pytest.mark.asyncio
    async def test_cancel_event_stops_polling(self, service_gateway, fake_client, download):
        fake_client.models.generate_videos.return_value = _operation(False)
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(GenerationCancelledError):
            await service_gateway.synthesize_video("A grim forest.", "16:9", cancel=cancel)

        fake_client.operations.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_uri_is_empty_response(self, service_gateway, fake_client, download):
        fake_client.models.generate_videos.return_value = _operation(True)

        with pytest.raises(EmptyResponseError):
            await service_gateway.synthesize_video("A grim forest.", "16:9")

    @pytest.mark.asyncio
    async def test_operation_error_is_gateway_error(self, service_gateway, fake_client, download):
        fake_client.models.generate_videos.return_value = _operation(True, error={"message": "quota"})

        with pytest.raises(GatewayError) as exc_info:
            await service_gateway.synthesize_video("A grim forest.", "16:9")

        assert str(exc_info.value) == "Video generation failed: quota"


@pytest.mark.parametrize("requested,expected", [
    ("16:9", "16:9"),
    ("9:16", "9:16"),
    ("1:1", "16:9"),
    ("4:3", "16:9"),
    ("3:4", "9:16"),
])
def test_video_aspect_ratio(requested, expected):
    assert video_aspect_ratio(requested) == expected
