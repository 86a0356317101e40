"""OpenAI-compatible chat completion client (DeepSeek by default)."""

from http import HTTPStatus
from typing import Any

import httpx
import structlog

from newsfilter.items import TokenUsage
from newsfilter.llm.errors import LlmApiError, LlmResponseError
from newsfilter.llm.models import Completion
from newsfilter.settings import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL, AppSettings


logger = structlog.get_logger()

_COMPLETIONS_PATH = "/chat/completions"
_ERROR_BODY_PREVIEW = 200


class ChatCompletionClient:
    """Client for ``/chat/completions`` in JSON mode.

    Transport errors (timeouts, connection failures) are not wrapped so
    that the caller's retry policy can classify them.

    Attributes:
        model: Model identifier sent with every request.
    """

    def __init__(  # noqa: PLR0913
        self,
        api_key: str,
        base_url: str = DEFAULT_LLM_BASE_URL,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Provider API key.
            base_url: API base URL.
            model: Model identifier.
            temperature: Sampling temperature.
            max_tokens: Completion token cap.
            timeout_seconds: Per-request timeout.
        """
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}{_COMPLETIONS_PATH}"
        self.model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout_seconds
        self._log = logger.bind(component="llm", subcomponent="client", model=model)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ChatCompletionClient":
        """Create a client from application settings.

        Raises:
            ValueError: If no API key is configured.
        """
        if not settings.deepseek_api_key:
            msg = "DEEPSEEK_API_KEY is not set"
            raise ValueError(msg)
        return cls(
            api_key=settings.deepseek_api_key,
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    def _build_request_body(
        self, system_prompt: str, user_prompt: str
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "response_format": {"type": "json_object"},
        }

    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        """Request one completion.

        Args:
            system_prompt: Instruction context.
            user_prompt: Per-item prompt.

        Returns:
            Completion with the first choice's content and the usage report.

        Raises:
            LlmApiError: On a non-2xx response or a non-JSON body.
            LlmResponseError: If the response has no message content.
            httpx.TimeoutException: If the request times out.
            httpx.NetworkError: On connection failures.
        """
        response = httpx.post(
            self._url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json=self._build_request_body(system_prompt, user_prompt),
            timeout=self._timeout,
        )

        if not response.is_success:
            self._log.warning(
                "completion_request_failed",
                status_code=response.status_code,
                body=response.text[:_ERROR_BODY_PREVIEW],
            )
            msg = f"Chat completion returned {response.status_code}"
            raise LlmApiError(msg, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            msg = "Chat completion response is not JSON"
            raise LlmApiError(msg, status_code=HTTPStatus.OK) from exc

        choices = data.get("choices") or []
        message = (choices[0].get("message") or {}) if choices else {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            msg = "Completion response has no content"
            raise LlmResponseError(msg)

        return Completion(
            content=content,
            usage=TokenUsage.from_usage(data.get("usage")),
            model=data.get("model") or self.model,
        )
