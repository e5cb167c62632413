"""API key providers.

The pipeline never reads the key from ambient state. It asks an injected
provider, which lets the CLI prompt interactively and tests use a fixed key.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import typer

from .config import Config, config as default_config

logger = logging.getLogger(__name__)


class KeyProvider(ABC):
    """Capability for obtaining the Gemini API key."""

    @abstractmethod
    def get_key(self) -> Optional[str]:
        """Return the current key, or None if no key is available."""
        ...

    def has_key(self) -> bool:
        """Return True if a non-empty key is available."""
        return bool(self.get_key())

    @abstractmethod
    def request_key(self) -> None:
        """Ask for a (new) key.

        Callers assume the request succeeded and go on to use whatever
        ``get_key`` returns next; the key itself is never test-called.
        """
        ...


class StaticKeyProvider(KeyProvider):
    """Provider holding a fixed key."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key
        self.requests = 0

    def get_key(self) -> Optional[str]:
        return self._api_key

    def request_key(self) -> None:
        self.requests += 1
        logger.info("Key requested from static provider; keeping current key")


class EnvKeyProvider(KeyProvider):
    """Provider reading the key from the process environment."""

    def __init__(self, cfg: Optional[Config] = None) -> None:
        self._config = cfg or default_config

    def get_key(self) -> Optional[str]:
        return self._config.gemini_api_key or None

    def request_key(self) -> None:
        logger.info("Reloading API key from environment")
        self._config.reload_api_key()


class PromptKeyProvider(EnvKeyProvider):
    """Provider that falls back to asking the user on the terminal."""

    def request_key(self) -> None:
        api_key = typer.prompt("Gemini API key", hide_input=True)
        self._config.gemini_api_key = api_key.strip()
        logger.debug("API key updated from prompt")
