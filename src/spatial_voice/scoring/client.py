"""DeepSeek chat-completions client for presentation scoring."""

import asyncio
from urllib.parse import urlsplit

import httpx
import openai
import structlog
from openai import AsyncOpenAI

from spatial_voice.scoring.errors import (
    ConfigurationError,
    ProtocolError,
    ServiceError,
    TransportError,
)

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://api.deepseek.com"
SYSTEM_PROMPT = "You are a helpful assistant and public speaking coach."


class ScoringClient:
    """Sends a scoring prompt to an OpenAI-compatible chat endpoint.

    The SDK's own retry loop is disabled: a failed call surfaces to the
    caller once. Transport failures alone may be retried, and only when
    `transport_retries` is above zero.

    Args:
        api_key: Bearer credential for the scoring service.
        base_url: Service root; requests go to `{base_url}/chat/completions`.
        model: Model identifier.
        max_tokens: Completion token limit.
        temperature: Sampling temperature.
        timeout: Request timeout in seconds.
        transport_retries: Extra attempts after a transport failure.
        retry_backoff_seconds: Base delay, doubled on each retry.
        http_client: Optional httpx client handed to the SDK.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        model: str = "deepseek-chat",
        max_tokens: int = 800,
        temperature: float = 0.4,
        timeout: float = 60.0,
        transport_retries: int = 0,
        retry_backoff_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.transport_retries = max(0, transport_retries)
        self.retry_backoff_seconds = retry_backoff_seconds
        self._http_client = http_client
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("Missing API key for the scoring service")

        parts = urlsplit(self.base_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Invalid scoring endpoint: {self.base_url!r}")

        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    async def complete(self, prompt: str) -> str:
        """Request a JSON score report for the prompt.

        Args:
            prompt: User message built by `build_prompt`.

        Returns:
            Raw assistant message content (expected to be JSON text).

        Raises:
            ConfigurationError: Credential or endpoint is unusable.
            ServiceError: The service returned a non-success status.
            ProtocolError: The response carried no message content.
            TransportError: The request never got a response.
        """
        client = self._get_client()

        attempt = 0
        while True:
            try:
                return await self._request(client, prompt)
            except TransportError as e:
                if attempt >= self.transport_retries:
                    raise
                delay = self.retry_backoff_seconds * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "scoring_transport_retry",
                    attempt=attempt,
                    max_attempts=self.transport_retries,
                    delay_seconds=delay,
                    error=str(e),
                )
                if delay > 0:
                    await asyncio.sleep(delay)

    async def _request(self, client: AsyncOpenAI, prompt: str) -> str:
        logger.info("scoring_request_sent", model=self.model, prompt_chars=len(prompt))
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            raise ServiceError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            # Also covers APITimeoutError
            raise TransportError(str(e)) from e
        except openai.APIResponseValidationError as e:
            raise ProtocolError(f"Malformed completion response: {e}") from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise ProtocolError("No choices in completion response")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not content:
            raise ProtocolError("No content in completion response")

        logger.info("scoring_response_received", content_chars=len(content))
        return content
