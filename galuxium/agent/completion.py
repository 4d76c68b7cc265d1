"""Structured completion client: OpenRouter chat completions and embeddings over httpx.

The pipeline only sees the `CompletionClient` protocol (`complete(role, system, user)`)
and the optional `Embedder` protocol (`embed(text)`). Every transport problem
(non-2xx, timeout, malformed body, empty content) is raised as ProviderError.
There is no retry here: callers decide whether a failure is fatal.

Example usage:
    async with OpenRouterClient(settings) as client:
        text = await client.complete(role="classifier", system=prompt, user=idea_text)
"""

import asyncio
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from galuxium.core.config import Settings, get_settings, resolve_model
from galuxium.core.exceptions import ProviderError

logger = structlog.get_logger(__name__)


@runtime_checkable
class CompletionClient(Protocol):
    """Black-box text completion: system + user prompt in, raw text out."""

    async def complete(self, role: str, system: str, user: str) -> str:
        """Return the model's text for one non-streaming request.

        Args:
            role: Pipeline role ("classifier", "BizMind", ...) used to pick the model

        Raises:
            ProviderError: On any transport/provider failure or empty content
        """
        ...


@runtime_checkable
class Embedder(Protocol):
    async def embed(self, text: str) -> list[float]: ...


class OpenRouterClient:
    """OpenRouter API client implementing CompletionClient and Embedder.

    Attributes:
        settings: App settings (API key, base URL, timeout, per-role models)
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            settings: Settings override (defaults to get_settings())
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not self.settings.openrouter_api_key:
            logger.warning("openrouter_api_key_missing", detail="OpenRouter requests will fail")

    async def __aenter__(self) -> "OpenRouterClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.openrouter_base_url,
                timeout=httpx.Timeout(self.settings.completion_timeout_seconds),
                headers={
                    "Authorization": f"Bearer {self.settings.openrouter_api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        try:
            # httpx timeouts are per-phase; wait_for bounds the whole request
            response = await asyncio.wait_for(
                client.post(path, json=payload),
                timeout=self.settings.completion_timeout_seconds,
            )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise ProviderError(f"Request to {path} timed out after {self.settings.completion_timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Request to {path} failed: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise ProviderError(
                f"Provider returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Provider returned a non-JSON body", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise ProviderError("Provider returned an unexpected body", status_code=response.status_code)
        return data

    async def create_chat_completion(
        self, model: str, messages: list[dict[str, str]], stream: bool = False
    ) -> dict[str, Any]:
        """POST /chat/completions and return the provider JSON unchanged."""
        return await self._post("/chat/completions", {"model": model, "messages": messages, "stream": stream})

    async def complete(self, role: str, system: str, user: str) -> str:
        model = resolve_model(role, self.settings)
        logger.info("completion_request", role=role, model=model)

        data = await self.create_chat_completion(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            stream=False,
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Malformed completion response for {role}") from e

        if not isinstance(content, str) or not content.strip():
            raise ProviderError("Model returned empty content.")

        usage = data.get("usage") or {}
        logger.info(
            "completion_response",
            role=role,
            model=model,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )
        return content.strip()

    async def embed(self, text: str) -> list[float]:
        data = await self._post("/embeddings", {"model": self.settings.embedding_model, "input": text})
        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Malformed embedding response") from e
        return [float(v) for v in vector]
