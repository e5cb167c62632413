"""Shared plumbing for Gemini API calls."""

import logging
from typing import Any, Callable, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import Config, config as default_config
from ..exceptions import ContentPolicyError, CredentialError, EmptyResponseError, GatewayError
from ..keys import EnvKeyProvider, KeyProvider
from ..models import Asset

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]

# Finish and block reasons that mean the request was refused on safety grounds.
BLOCK_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "IMAGE_PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
    "RECITATION",
}

_CREDENTIAL_MARKERS = ("api key not valid", "requested entity was not found", "api_key_invalid")


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def _reason_name(reason: Any) -> Optional[str]:
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


class GeminiService:
    """Base class for clients calling the Gemini API.

    A new SDK client is created for every call so a key swapped in by the
    key provider takes effect immediately.
    """

    def __init__(
        self,
        key_provider: Optional[KeyProvider] = None,
        cfg: Optional[Config] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        """Initialize the service.

        Args:
            key_provider: Source of the API key. Defaults to the environment.
            cfg: Configuration. Defaults to the global config.
            client_factory: Callable building an SDK client from a key.
        """
        self._config = cfg or default_config
        self._key_provider = key_provider or EnvKeyProvider(self._config)
        self._client_factory = client_factory or _default_client_factory

    def _api_key(self) -> str:
        api_key = self._key_provider.get_key()
        if not api_key:
            raise CredentialError("No API key configured. Connect a Gemini API key to continue.")
        return api_key

    def _client(self) -> Any:
        return self._client_factory(self._api_key())

    def _translate_error(self, exc: Exception, action: str) -> GatewayError:
        """Map an SDK or transport exception to a gateway error."""
        if isinstance(exc, GatewayError):
            return exc

        message = getattr(exc, "message", None) or str(exc)
        if isinstance(exc, genai_errors.APIError):
            lowered = (message or "").lower()
            if exc.code in (401, 403) or any(m in lowered for m in _CREDENTIAL_MARKERS):
                logger.warning(f"{action} rejected credentials: {message}")
                return CredentialError(
                    f"The API key was rejected ({message}). Please connect a valid key.",
                    {"code": exc.code},
                )
            logger.error(f"{action} failed with API error {exc.code}: {message}")
            return GatewayError(message, {"code": exc.code})

        logger.error(f"{action} failed: {exc}")
        return GatewayError(message)

    def _extract_image(self, response: Any, refused_message: str, failed_message: str) -> Asset:
        """Return the first inline image of a generateContent response.

        Raises:
            ContentPolicyError: If the prompt or candidate was blocked.
            EmptyResponseError: If the response carries no image.
        """
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = _reason_name(getattr(feedback, "block_reason", None))
        if block_reason and block_reason != "BLOCKED_REASON_UNSPECIFIED":
            raise ContentPolicyError(refused_message, reason=block_reason)

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise EmptyResponseError(failed_message)

        candidate = candidates[0]
        finish_reason = _reason_name(getattr(candidate, "finish_reason", None))
        if finish_reason in BLOCK_REASONS:
            logger.warning(f"Image request blocked: finish_reason={finish_reason}")
            raise ContentPolicyError(refused_message, reason=finish_reason)

        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                mime_type = inline.mime_type or "image/png"
                if isinstance(data, str):
                    return Asset.from_base64(data, mime_type)
                return Asset(mime_type=mime_type, data=data)

        text = next((p.text for p in parts if getattr(p, "text", None)), None)
        if text:
            raise EmptyResponseError(f"Asset creation failed: {text[:80]}")
        raise EmptyResponseError(failed_message)

    @staticmethod
    def _image_part(asset: Asset) -> types.Part:
        return types.Part.from_bytes(data=asset.data, mime_type=asset.mime_type)
