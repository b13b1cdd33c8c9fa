"""
Anthropic Language Model Adapter

Implements the LanguageModel interface over Anthropic's Messages API.
The prompt is sent as a single user turn.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterator, Optional, Union

import structlog
from anthropic import Anthropic, DefaultHttpxClient

from llmbridge.adapters.base import (
    Capabilities,
    FinishReason,
    LanguageModel,
    Response,
    StreamChunk,
    TokenCountEstimator,
    TokenUsage,
)
from llmbridge.adapters.http import ProxyOptions, http_client_kwargs, to_seconds

logger = structlog.get_logger(__name__)

DEFAULT_MODEL_NAME = "claude-3-5-haiku-latest"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "tool_use": FinishReason.TOOL_EXECUTION,
    "refusal": FinishReason.CONTENT_FILTER,
}


def finish_reason_from(stop_reason: Optional[str]) -> Optional[FinishReason]:
    """Map an Anthropic stop reason onto FinishReason."""
    if stop_reason is None:
        return None
    return _STOP_REASONS.get(stop_reason, FinishReason.OTHER)


def token_usage_from(usage: Any) -> Optional[TokenUsage]:
    if usage is None:
        return None
    return TokenUsage(
        input_token_count=usage.input_tokens,
        output_token_count=usage.output_tokens,
    )


@dataclass(frozen=True)
class AnthropicParameters:
    """Sampling parameters sent with every request."""
    model_name: str = DEFAULT_MODEL_NAME
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stop_sequences: Optional[tuple[str, ...]] = None

    def to_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.top_p is not None:
            kwargs["top_p"] = self.top_p
        if self.top_k is not None:
            kwargs["top_k"] = self.top_k
        if self.stop_sequences:
            kwargs["stop_sequences"] = list(self.stop_sequences)
        return kwargs


class AnthropicLanguageModel(LanguageModel, TokenCountEstimator):
    """
    Anthropic Claude language model.

    Translates a single prompt into a Messages API request and joins the
    text blocks of the reply.
    """

    provider = "anthropic"
    capabilities = Capabilities(completion=True, streaming=True)

    def __init__(self, client: Anthropic, parameters: Optional[AnthropicParameters] = None):
        """
        Initialize the Anthropic adapter.

        Args:
            client: Anthropic SDK client.
            parameters: Sampling parameters; defaults apply when omitted.
        """
        self._client = client
        self._parameters = parameters or AnthropicParameters()
        logger.info(
            "language_model.created",
            provider=self.provider,
            model=self._parameters.model_name,
        )

    @property
    def client(self) -> Anthropic:
        return self._client

    @property
    def parameters(self) -> AnthropicParameters:
        return self._parameters

    @staticmethod
    def _messages(prompt: str) -> list[dict[str, str]]:
        return [{"role": "user", "content": prompt}]

    def generate(self, prompt: str) -> Response[str]:
        message = self._client.messages.create(
            messages=self._messages(prompt),
            **self._parameters.to_kwargs(),
        )

        content = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        response = Response(
            content=content,
            token_usage=token_usage_from(message.usage),
            finish_reason=finish_reason_from(message.stop_reason),
        )
        logger.debug(
            "completion.generated",
            provider=self.provider,
            model=self._parameters.model_name,
            finish_reason=response.finish_reason,
            token_usage=response.token_usage,
        )
        return response

    def stream(self, prompt: str) -> Iterator[StreamChunk]:
        parts: list[str] = []
        with self._client.messages.stream(
            messages=self._messages(prompt),
            **self._parameters.to_kwargs(),
        ) as stream:
            for text in stream.text_stream:
                if text:
                    parts.append(text)
                    yield StreamChunk(text=text)
            message = stream.get_final_message()

        finish_reason = finish_reason_from(message.stop_reason)
        yield StreamChunk(
            finish_reason=finish_reason,
            response=Response(
                content="".join(parts),
                token_usage=token_usage_from(message.usage),
                finish_reason=finish_reason,
            ),
        )

    def estimate_token_count(self, prompt: str) -> int:
        """Count prompt tokens with the Messages token counting endpoint."""
        result = self._client.messages.count_tokens(
            model=self._parameters.model_name,
            messages=self._messages(prompt),
        )
        return result.input_tokens

    @classmethod
    def builder(cls) -> "AnthropicLanguageModelBuilder":
        return AnthropicLanguageModelBuilder()


class AnthropicLanguageModelBuilder:
    """Builder for AnthropicLanguageModel."""

    def __init__(self):
        self._api_key: Optional[str] = None
        self._base_url: Optional[str] = None
        self._model_name: Optional[str] = None
        self._temperature: Optional[float] = None
        self._top_p: Optional[float] = None
        self._top_k: Optional[int] = None
        self._max_tokens: Optional[int] = None
        self._stop_sequences: Optional[list[str]] = None
        self._timeout: Optional[float] = None
        self._max_retries: Optional[int] = None
        self._proxy_options: Optional[ProxyOptions] = None
        self._log_requests_and_responses = False
        self._anthropic_client: Optional[Anthropic] = None

    def api_key(self, api_key: str):
        self._api_key = api_key
        return self

    def base_url(self, base_url: str):
        self._base_url = base_url
        return self

    def model_name(self, model_name: str):
        self._model_name = model_name
        return self

    def temperature(self, temperature: float):
        self._temperature = temperature
        return self

    def top_p(self, top_p: float):
        self._top_p = top_p
        return self

    def top_k(self, top_k: int):
        self._top_k = top_k
        return self

    def max_tokens(self, max_tokens: int):
        self._max_tokens = max_tokens
        return self

    def stop_sequences(self, stop_sequences: list[str]):
        self._stop_sequences = stop_sequences
        return self

    def timeout(self, timeout: Union[float, timedelta]):
        self._timeout = to_seconds(timeout)
        return self

    def max_retries(self, max_retries: int):
        self._max_retries = max_retries
        return self

    def proxy_options(self, proxy_options: ProxyOptions):
        self._proxy_options = proxy_options
        return self

    def log_requests_and_responses(self, log_requests_and_responses: bool = True):
        self._log_requests_and_responses = log_requests_and_responses
        return self

    def anthropic_client(self, anthropic_client: Anthropic):
        """Use a pre-built client; connection setters are then ignored."""
        self._anthropic_client = anthropic_client
        return self

    def _client(self) -> Anthropic:
        if self._anthropic_client is not None:
            return self._anthropic_client

        kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "timeout": self._timeout if self._timeout is not None else DEFAULT_TIMEOUT,
            "max_retries": (
                self._max_retries if self._max_retries is not None else DEFAULT_MAX_RETRIES
            ),
        }
        if self._base_url:
            kwargs["base_url"] = self._base_url
        http_kwargs = http_client_kwargs(self._proxy_options, self._log_requests_and_responses)
        if http_kwargs is not None:
            kwargs["http_client"] = DefaultHttpxClient(**http_kwargs)
        return Anthropic(**kwargs)

    def build(self) -> AnthropicLanguageModel:
        parameters = AnthropicParameters(
            model_name=self._model_name or DEFAULT_MODEL_NAME,
            max_tokens=self._max_tokens or DEFAULT_MAX_TOKENS,
            temperature=self._temperature,
            top_p=self._top_p,
            top_k=self._top_k,
            stop_sequences=tuple(self._stop_sequences) if self._stop_sequences else None,
        )
        return AnthropicLanguageModel(self._client(), parameters)
