"""Text generation client — the only place that talks to the language model."""

import abc
import logging
from dataclasses import dataclass

import httpx

from feedback_engine.config import settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The model could not be reached or returned an error status."""


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call generation parameters."""
    system: str = ""
    max_tokens: int = 200
    temperature: float = 0.3
    json_mode: bool = True


class TextGenerator(abc.ABC):
    """Anything that turns a prompt into free-form text."""

    @abc.abstractmethod
    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Return the raw model output for *prompt*."""

    async def close(self):
        pass


class OllamaGenerator(TextGenerator):
    """Generates text with a local Ollama model."""

    def __init__(self, base_url: str = None, model: str = None, timeout: float = None):
        self._base_url = (base_url or settings.ollama_url).rstrip("/")
        self.model = model or settings.ollama_model
        self._client = httpx.AsyncClient(timeout=timeout or settings.ollama_timeout_seconds)

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": options.temperature,
                "num_predict": options.max_tokens,
            },
        }
        if options.system:
            payload["system"] = options.system
        if options.json_mode:
            payload["format"] = "json"

        try:
            response = await self._client.post(f"{self._base_url}/api/generate", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("Ollama request timed out")
            raise GenerationError("Ollama request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Ollama HTTP error: {e}")
            raise GenerationError(f"Ollama HTTP error: {e}") from e

        data = response.json()
        return (data.get("response") or "").strip()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
