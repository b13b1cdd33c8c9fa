"""
Azure OpenAI Language Model Adapter

Text completion (e.g. gpt-35-turbo-instruct) against Azure OpenAI Service,
or against the public OpenAI service when built with a non-Azure key.

There are three ways to authenticate:

1. An Azure OpenAI API key: ``builder.api_key("...")``.
2. A public OpenAI key: ``builder.non_azure_api_key("...")``, which also
   sets the endpoint to https://api.openai.com/v1.
3. Microsoft Entra ID: ``builder.token_credential(DefaultAzureCredential())``.

A pre-built OpenAI client can be passed with ``builder.openai_client(...)``.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterator, Optional

import structlog

from llmbridge.adapters.azure_helpers import (
    AzureOpenAiBuilder,
    finish_reason_from,
    token_usage_from,
)
from llmbridge.adapters.base import (
    AsyncLanguageModel,
    Capabilities,
    FinishReason,
    LanguageModel,
    Response,
    StreamChunk,
    TokenCountEstimator,
    TokenUsage,
)
from llmbridge.adapters.tokenizer import OpenAiTokenizer, Tokenizer

logger = structlog.get_logger(__name__)

DEFAULT_DEPLOYMENT_NAME = "gpt-35-turbo-instruct"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOKENIZER_MODEL = "gpt-3.5-turbo-instruct"


@dataclass(frozen=True)
class CompletionParameters:
    """Sampling parameters sent with every completion request."""
    deployment_name: str = DEFAULT_DEPLOYMENT_NAME
    temperature: Optional[float] = DEFAULT_TEMPERATURE
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None

    def to_kwargs(self) -> dict[str, Any]:
        # Azure routes on the deployment name, passed as the model
        kwargs: dict[str, Any] = {"model": self.deployment_name}
        for name in ("temperature", "top_p", "max_tokens", "presence_penalty", "frequency_penalty"):
            value = getattr(self, name)
            if value is not None:
                kwargs[name] = value
        return kwargs


class _StreamAssembler:
    """Collects completion stream chunks into a single response."""

    def __init__(self):
        self._parts: list[str] = []
        self._finish_reason: Optional[FinishReason] = None
        self._token_usage: Optional[TokenUsage] = None

    def append(self, chunk: Any) -> Optional[str]:
        """Record a vendor chunk and return its text delta, if any."""
        usage = getattr(chunk, "usage", None)
        if usage is not None:
            self._token_usage = token_usage_from(usage)
        # Azure sends prompt filter results in chunks without choices
        if not chunk.choices:
            return None
        choice = chunk.choices[0]
        if choice.finish_reason:
            self._finish_reason = finish_reason_from(choice.finish_reason)
        if choice.text:
            self._parts.append(choice.text)
            return choice.text
        return None

    def final_chunk(self, prompt: str, tokenizer: Tokenizer) -> StreamChunk:
        text = "".join(self._parts)
        token_usage = self._token_usage
        if token_usage is None:
            token_usage = TokenUsage(
                input_token_count=tokenizer.estimate_token_count_in_text(prompt),
                output_token_count=tokenizer.estimate_token_count_in_text(text),
            )
        return StreamChunk(
            finish_reason=self._finish_reason,
            response=Response(
                content=text,
                token_usage=token_usage,
                finish_reason=self._finish_reason,
            ),
        )


class _AzureOpenAiCompletionModel(TokenCountEstimator):
    """Configuration and mapping shared by the sync and async models."""

    provider = "azure"
    capabilities = Capabilities(completion=True, streaming=True)

    def __init__(
        self,
        client: Any,
        deployment_name: Optional[str] = None,
        tokenizer: Optional[Tokenizer] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
    ):
        """
        Initialize the language model.

        Args:
            client: OpenAI or AzureOpenAI client (async flavour for the async model).
            deployment_name: Azure deployment, or model name for public OpenAI.
            tokenizer: Used for token estimates. Defaults to the
                gpt-3.5-turbo-instruct encoding.
            temperature: Sampling temperature. Defaults to 0.7.
            top_p: Nucleus sampling mass.
            max_tokens: Maximum completion length.
            presence_penalty: Penalty for tokens already present.
            frequency_penalty: Penalty proportional to token frequency.
        """
        self._client = client
        self._parameters = CompletionParameters(
            deployment_name=deployment_name or DEFAULT_DEPLOYMENT_NAME,
            temperature=temperature if temperature is not None else DEFAULT_TEMPERATURE,
            top_p=top_p,
            max_tokens=max_tokens,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
        )
        self._tokenizer = tokenizer or OpenAiTokenizer(DEFAULT_TOKENIZER_MODEL)
        logger.info(
            "language_model.created",
            provider=self.provider,
            deployment=self._parameters.deployment_name,
        )

    @property
    def client(self) -> Any:
        return self._client

    @property
    def parameters(self) -> CompletionParameters:
        return self._parameters

    def estimate_token_count(self, prompt: str) -> int:
        return self._tokenizer.estimate_token_count_in_text(prompt)

    def _request_kwargs(self, prompt: str, stream: bool = False) -> dict[str, Any]:
        kwargs = self._parameters.to_kwargs()
        kwargs["prompt"] = [prompt]
        if stream:
            kwargs["stream"] = True
        return kwargs

    def _response_from(self, completions: Any) -> Response[str]:
        choice = completions.choices[0]
        response = Response(
            content=choice.text,
            token_usage=token_usage_from(completions.usage),
            finish_reason=finish_reason_from(choice.finish_reason),
        )
        logger.debug(
            "completion.generated",
            provider=self.provider,
            deployment=self._parameters.deployment_name,
            finish_reason=response.finish_reason,
            token_usage=response.token_usage,
        )
        return response


class AzureOpenAiLanguageModel(_AzureOpenAiCompletionModel, LanguageModel):
    """
    Azure OpenAI text completion model.

    For multi-turn conversations and tool calling use a chat model instead;
    this adapter only covers the completions endpoint.
    """

    def generate(self, prompt: str) -> Response[str]:
        completions = self._client.completions.create(**self._request_kwargs(prompt))
        return self._response_from(completions)

    def stream(self, prompt: str) -> Iterator[StreamChunk]:
        assembler = _StreamAssembler()
        kwargs = self._request_kwargs(prompt, stream=True)
        with self._client.completions.create(**kwargs) as stream:
            for chunk in stream:
                text = assembler.append(chunk)
                if text:
                    yield StreamChunk(text=text)
        yield assembler.final_chunk(prompt, self._tokenizer)

    @classmethod
    def builder(cls) -> "AzureOpenAiLanguageModelBuilder":
        return AzureOpenAiLanguageModelBuilder()


class AsyncAzureOpenAiLanguageModel(_AzureOpenAiCompletionModel, AsyncLanguageModel):
    """Azure OpenAI text completion model over the asyncio client."""

    capabilities = Capabilities(completion=True, streaming=True, async_=True)

    async def agenerate(self, prompt: str) -> Response[str]:
        completions = await self._client.completions.create(**self._request_kwargs(prompt))
        return self._response_from(completions)

    async def astream(self, prompt: str) -> AsyncIterator[StreamChunk]:
        assembler = _StreamAssembler()
        stream = await self._client.completions.create(**self._request_kwargs(prompt, stream=True))
        async with stream:
            async for chunk in stream:
                text = assembler.append(chunk)
                if text:
                    yield StreamChunk(text=text)
        yield assembler.final_chunk(prompt, self._tokenizer)

    @classmethod
    def builder(cls) -> "AzureOpenAiLanguageModelBuilder":
        return AzureOpenAiLanguageModelBuilder()


class AzureOpenAiLanguageModelBuilder(AzureOpenAiBuilder):
    """Builder for AzureOpenAiLanguageModel and its async counterpart."""

    def __init__(self):
        super().__init__()
        self._tokenizer: Optional[Tokenizer] = None
        self._temperature: Optional[float] = None
        self._top_p: Optional[float] = None
        self._max_tokens: Optional[int] = None
        self._presence_penalty: Optional[float] = None
        self._frequency_penalty: Optional[float] = None

    def tokenizer(self, tokenizer: Tokenizer):
        self._tokenizer = tokenizer
        return self

    def temperature(self, temperature: float):
        self._temperature = temperature
        return self

    def top_p(self, top_p: float):
        self._top_p = top_p
        return self

    def max_tokens(self, max_tokens: int):
        self._max_tokens = max_tokens
        return self

    def presence_penalty(self, presence_penalty: float):
        self._presence_penalty = presence_penalty
        return self

    def frequency_penalty(self, frequency_penalty: float):
        self._frequency_penalty = frequency_penalty
        return self

    def _model_kwargs(self) -> dict[str, Any]:
        return {
            "deployment_name": self._deployment_name,
            "tokenizer": self._tokenizer,
            "temperature": self._temperature,
            "top_p": self._top_p,
            "max_tokens": self._max_tokens,
            "presence_penalty": self._presence_penalty,
            "frequency_penalty": self._frequency_penalty,
        }

    def build(self) -> AzureOpenAiLanguageModel:
        return AzureOpenAiLanguageModel(self._client(), **self._model_kwargs())

    def build_async(self) -> AsyncAzureOpenAiLanguageModel:
        return AsyncAzureOpenAiLanguageModel(
            self._client(async_client=True), **self._model_kwargs()
        )
