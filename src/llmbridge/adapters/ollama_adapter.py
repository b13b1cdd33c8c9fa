"""
Ollama Language Model Adapter

Implements the LanguageModel interface for Ollama (local LLM) using the
/api/generate endpoint. Supports both single-shot and streaming generation.
"""

import json
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterator, Optional, Union

import httpx
import structlog

from llmbridge.adapters.base import (
    AdapterError,
    Capabilities,
    FinishReason,
    LanguageModel,
    Response,
    StreamChunk,
    TokenUsage,
)
from llmbridge.adapters.http import ProxyOptions, log_request, log_response, to_seconds

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL_NAME = "llama3.2:1b"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3


def finish_reason_from(done_reason: Optional[str]) -> Optional[FinishReason]:
    if done_reason is None:
        return None
    if done_reason == "stop":
        return FinishReason.STOP
    if done_reason == "length":
        return FinishReason.LENGTH
    return FinishReason.OTHER


def check_error(data: dict[str, Any], status_code: Optional[int] = None) -> None:
    """Raise when Ollama reports a failure in the response body."""
    if "error" in data:
        raise AdapterError(message=data["error"], provider="ollama", status_code=status_code)


def token_usage_from(data: dict[str, Any]) -> TokenUsage:
    return TokenUsage(
        input_token_count=data.get("prompt_eval_count", 0),
        output_token_count=data.get("eval_count", 0),
    )


@dataclass(frozen=True)
class OllamaOptions:
    """Model options sent in the request's "options" object."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    repeat_penalty: Optional[float] = None
    seed: Optional[int] = None
    num_predict: Optional[int] = None
    stop: Optional[tuple[str, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        options = {
            k: v for k, v in {
                "temperature": self.temperature,
                "top_p": self.top_p,
                "top_k": self.top_k,
                "repeat_penalty": self.repeat_penalty,
                "seed": self.seed,
                "num_predict": self.num_predict,
            }.items() if v is not None
        }
        if self.stop:
            options["stop"] = list(self.stop)
        return options


class OllamaLanguageModel(LanguageModel):
    """
    Ollama Local LLM Adapter.

    Provides text generation using Ollama's local API,
    with support for streaming responses.
    """

    provider = "ollama"
    capabilities = Capabilities(completion=True, streaming=True)

    def __init__(
        self,
        client: httpx.Client,
        model_name: Optional[str] = None,
        options: Optional[OllamaOptions] = None,
        format: Optional[str] = None,
    ):
        """
        Initialize the Ollama adapter.

        Args:
            client: httpx client whose base_url points at the Ollama host.
            model_name: Model tag, e.g. llama3.2:1b.
            options: Sampling options.
            format: Output format constraint, e.g. "json".
        """
        self._client = client
        self._model_name = model_name or DEFAULT_MODEL_NAME
        self._options = options or OllamaOptions()
        self._format = format
        logger.info(
            "language_model.created",
            provider=self.provider,
            model=self._model_name,
            host=str(client.base_url),
        )

    @property
    def client(self) -> httpx.Client:
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    def _payload(self, prompt: str, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model_name,
            "prompt": prompt,
            "stream": stream,
        }
        options = self._options.to_dict()
        if options:
            payload["options"] = options
        if self._format:
            payload["format"] = self._format
        return payload

    def generate(self, prompt: str) -> Response[str]:
        response = self._client.post("/api/generate", json=self._payload(prompt, stream=False))
        response.raise_for_status()
        data = response.json()
        check_error(data, response.status_code)

        # Older Ollama releases report "done" without a "done_reason"
        done_reason = data.get("done_reason") or ("stop" if data.get("done") else None)
        result = Response(
            content=data.get("response", ""),
            token_usage=token_usage_from(data),
            finish_reason=finish_reason_from(done_reason),
        )
        logger.debug(
            "completion.generated",
            provider=self.provider,
            model=self._model_name,
            finish_reason=result.finish_reason,
            token_usage=result.token_usage,
        )
        return result

    def stream(self, prompt: str) -> Iterator[StreamChunk]:
        parts: list[str] = []
        token_usage: Optional[TokenUsage] = None
        finish_reason: Optional[FinishReason] = None

        with self._client.stream(
            "POST", "/api/generate", json=self._payload(prompt, stream=True)
        ) as response:
            response.raise_for_status()

            for line in response.iter_lines():
                if not line:
                    continue
                data = json.loads(line)
                check_error(data, response.status_code)

                text = data.get("response", "")
                if text:
                    parts.append(text)
                    yield StreamChunk(text=text)

                if data.get("done"):
                    token_usage = token_usage_from(data)
                    finish_reason = finish_reason_from(data.get("done_reason") or "stop")

        yield StreamChunk(
            finish_reason=finish_reason,
            response=Response(
                content="".join(parts),
                token_usage=token_usage,
                finish_reason=finish_reason,
            ),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    @classmethod
    def builder(cls) -> "OllamaLanguageModelBuilder":
        return OllamaLanguageModelBuilder()


class OllamaLanguageModelBuilder:
    """Builder for OllamaLanguageModel."""

    def __init__(self):
        self._base_url: Optional[str] = None
        self._model_name: Optional[str] = None
        self._temperature: Optional[float] = None
        self._top_p: Optional[float] = None
        self._top_k: Optional[int] = None
        self._repeat_penalty: Optional[float] = None
        self._seed: Optional[int] = None
        self._num_predict: Optional[int] = None
        self._stop: Optional[list[str]] = None
        self._format: Optional[str] = None
        self._timeout: Optional[float] = None
        self._max_retries: Optional[int] = None
        self._proxy_options: Optional[ProxyOptions] = None
        self._log_requests_and_responses = False
        self._http_client: Optional[httpx.Client] = None

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

    def repeat_penalty(self, repeat_penalty: float):
        self._repeat_penalty = repeat_penalty
        return self

    def seed(self, seed: int):
        self._seed = seed
        return self

    def num_predict(self, num_predict: int):
        self._num_predict = num_predict
        return self

    def stop(self, stop: list[str]):
        self._stop = stop
        return self

    def format(self, format: str):
        self._format = format
        return self

    def timeout(self, timeout: Union[float, timedelta]):
        self._timeout = to_seconds(timeout)
        return self

    def max_retries(self, max_retries: int):
        """Connection retries, handled by the httpx transport."""
        self._max_retries = max_retries
        return self

    def proxy_options(self, proxy_options: ProxyOptions):
        self._proxy_options = proxy_options
        return self

    def log_requests_and_responses(self, log_requests_and_responses: bool = True):
        self._log_requests_and_responses = log_requests_and_responses
        return self

    def http_client(self, http_client: httpx.Client):
        """Use a pre-built httpx client; connection setters are then ignored."""
        self._http_client = http_client
        return self

    def _client(self) -> httpx.Client:
        if self._http_client is not None:
            return self._http_client

        transport = httpx.HTTPTransport(
            retries=self._max_retries if self._max_retries is not None else DEFAULT_MAX_RETRIES,
            proxy=self._proxy_options.url if self._proxy_options else None,
        )
        kwargs: dict[str, Any] = {
            "base_url": (self._base_url or DEFAULT_BASE_URL).rstrip("/"),
            "timeout": httpx.Timeout(
                self._timeout if self._timeout is not None else DEFAULT_TIMEOUT
            ),
            "transport": transport,
        }
        if self._log_requests_and_responses:
            kwargs["event_hooks"] = {"request": [log_request], "response": [log_response]}
        return httpx.Client(**kwargs)

    def build(self) -> OllamaLanguageModel:
        options = OllamaOptions(
            temperature=self._temperature,
            top_p=self._top_p,
            top_k=self._top_k,
            repeat_penalty=self._repeat_penalty,
            seed=self._seed,
            num_predict=self._num_predict,
            stop=tuple(self._stop) if self._stop else None,
        )
        return OllamaLanguageModel(
            self._client(),
            model_name=self._model_name,
            options=options,
            format=self._format,
        )
