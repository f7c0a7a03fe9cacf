"""LLM client for the generative-language `generateContent` endpoint.

Security: the API key comes from the canvas config only, never hardcoded.
One request per call; no retries.
"""

import json
import logging
import re
import time
from typing import Any, Protocol

import httpx

from shn_canvas.errors import LLMParseError, LLMRequestError, ResponseShapeError
from shn_canvas.settings_store import CanvasConfig
from shn_canvas.utils.metrics import metrics

logger = logging.getLogger(__name__)

PROMPT_SEPARATOR = "\n\n---\n\n"
TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 8192

# First fenced block wins; nested or multiple fences are not handled
FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def build_prompt_text(prompt: str, content: str) -> str:
    """Join the instruction prompt and the payload with the fixed separator."""
    return f"{prompt}{PROMPT_SEPARATOR}{content}" if prompt else content


def extract_fenced_text(text: str) -> str:
    """Return the interior of the first fenced code block, else the trimmed text."""
    match = FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def response_text(payload: dict[str, Any]) -> str:
    """Concatenate ``candidates[0].content.parts[*].text``.

    Raises:
        ResponseShapeError: If the first candidate or its content is missing
    """
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict) or not candidates[0].get("content"):
        raise ResponseShapeError("Generation response has no candidate content")
    parts = candidates[0]["content"].get("parts") or []
    return "".join(part.get("text", "") or "" for part in parts)


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    async def call(self, prompt: str, content: str) -> str:
        """Run one generation and return fenced-or-trimmed text.

        Args:
            prompt: Instruction prompt (may be empty)
            content: Payload appended after the separator

        Returns:
            Extracted text
        """
        ...


class GeminiClient:
    """Gemini-backed LLM client using httpx."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Generative language API key
            model: Model name (e.g. gemini-2.0-flash-exp)
            base_url: API base URL
            client: Optional httpx client (for testing with mocks)
            timeout: Timeout used when this class creates its own client
        """
        self.model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self.model}:generateContent"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _generate(self, text: str, generation_config: dict[str, Any]) -> str:
        body = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": generation_config,
        }

        start = time.perf_counter()
        response = await self._client.post(self.endpoint, params={"key": self._api_key}, json=body)
        latency_ms = (time.perf_counter() - start) * 1000

        if not response.is_success:
            metrics.record_llm_latency(self.model, "error", latency_ms)
            metrics.inc_llm_error(self.model, f"http_{response.status_code}")
            logger.error(f"Gemini API call failed: {response.status_code}")
            raise LLMRequestError(response.status_code, response.text)

        try:
            result = response_text(response.json())
        except (ValueError, ResponseShapeError) as e:
            metrics.record_llm_latency(self.model, "error", latency_ms)
            metrics.inc_llm_error(self.model, "response_shape")
            if isinstance(e, ResponseShapeError):
                raise
            raise ResponseShapeError(f"Generation response is not JSON: {e}") from e

        metrics.record_llm_latency(self.model, "success", latency_ms)
        logger.info(f"Gemini call ok ({self.model}, {round(latency_ms)}ms, {len(result)} chars)")
        return result

    async def call(self, prompt: str, content: str) -> str:
        """Generate text; returns the first fenced block or the trimmed text.

        Raises:
            LLMRequestError: On non-success HTTP status
            ResponseShapeError: If the response lacks candidate content
        """
        text = build_prompt_text(prompt, content)
        raw = await self._generate(text, {"temperature": TEMPERATURE, "maxOutputTokens": MAX_OUTPUT_TOKENS})
        return extract_fenced_text(raw)

    async def call_json(self, prompt: str, content: str) -> Any:
        """Generate structured output and parse it as JSON.

        Raises:
            LLMRequestError: On non-success HTTP status
            ResponseShapeError: If the response lacks candidate content
            LLMParseError: If the output is not valid JSON
        """
        text = build_prompt_text(prompt, content)
        raw = await self._generate(
            text, {"temperature": TEMPERATURE, "responseMimeType": "application/json"}
        )
        extracted = extract_fenced_text(raw)
        try:
            return json.loads(extracted)
        except json.JSONDecodeError as e:
            metrics.inc_llm_error(self.model, "json_parse")
            raise LLMParseError(f"Model output is not valid JSON: {e}", raw_text=extracted) from e


def get_llm_client(
    config: CanvasConfig,
    *,
    base_url: str = "https://generativelanguage.googleapis.com/v1beta",
    client: httpx.AsyncClient | None = None,
    timeout: float = 120.0,
) -> GeminiClient:
    """Factory for the configured LLM client.

    Raises:
        ConfigurationMissingError: If no LLM API key is configured
    """
    api_key = config.require_llm_key()
    logger.info(f"Using Gemini client with model {config.llm.model}")
    return GeminiClient(
        api_key=api_key, model=config.llm.model, base_url=base_url, client=client, timeout=timeout
    )
