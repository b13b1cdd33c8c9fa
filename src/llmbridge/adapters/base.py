"""
Base Adapter Interface

Defines the abstract contracts that every provider adapter implements,
together with the shared response types those adapters return.
Adapters are independent of each other; this module is the only thing
they have in common.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class FinishReason(str, Enum):
    """Why the model stopped producing output."""
    STOP = "stop"
    LENGTH = "length"
    TOOL_EXECUTION = "tool_execution"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


@dataclass(frozen=True)
class TokenUsage:
    """Token usage statistics."""
    input_token_count: Optional[int] = None
    output_token_count: Optional[int] = None
    total_token_count: Optional[int] = None

    def __post_init__(self):
        if (
            self.total_token_count is None
            and self.input_token_count is not None
            and self.output_token_count is not None
        ):
            object.__setattr__(
                self,
                "total_token_count",
                self.input_token_count + self.output_token_count,
            )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if other is None:
            return self
        return TokenUsage(
            input_token_count=_sum(self.input_token_count, other.input_token_count),
            output_token_count=_sum(self.output_token_count, other.output_token_count),
            total_token_count=_sum(self.total_token_count, other.total_token_count),
        )


def _sum(first: Optional[int], second: Optional[int]) -> Optional[int]:
    if first is None:
        return second
    if second is None:
        return first
    return first + second


@dataclass(frozen=True)
class Response(Generic[T]):
    """Unified model response."""
    content: T
    token_usage: Optional[TokenUsage] = None
    finish_reason: Optional[FinishReason] = None


@dataclass(frozen=True)
class StreamChunk:
    """
    A streaming response chunk.

    Text chunks carry a delta in ``text``. The last chunk of every stream
    carries the fully assembled ``response``.
    """
    text: str = ""
    finish_reason: Optional[FinishReason] = None
    response: Optional[Response[str]] = None

    @property
    def is_final(self) -> bool:
        return self.response is not None


@dataclass(frozen=True)
class Embedding:
    """A dense vector embedding."""
    vector: list[float]

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class Image:
    """A generated image, by URL or inline base64 data."""
    url: Optional[str] = None
    base64_data: Optional[str] = None
    revised_prompt: Optional[str] = None


@dataclass(frozen=True)
class Capabilities:
    """Optional features an adapter supports."""
    completion: bool = False
    streaming: bool = False
    async_: bool = False
    embeddings: bool = False
    image_generation: bool = False
    reranking: bool = False

    def __or__(self, other: "Capabilities") -> "Capabilities":
        return Capabilities(
            completion=self.completion or other.completion,
            streaming=self.streaming or other.streaming,
            async_=self.async_ or other.async_,
            embeddings=self.embeddings or other.embeddings,
            image_generation=self.image_generation or other.image_generation,
            reranking=self.reranking or other.reranking,
        )


class Adapter(ABC):
    """Common class attributes of every adapter."""

    provider: str = ""
    capabilities: Capabilities = Capabilities()

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'azure', 'anthropic')."""
        return self.provider


class LanguageModel(Adapter):
    """
    Abstract base class for text completion adapters.

    A language model takes a single prompt string and returns the
    completion text. Implementations delegate to exactly one vendor client.
    """

    @abstractmethod
    def generate(self, prompt: str) -> Response[str]:
        """
        Generate a completion for the prompt.

        Args:
            prompt: The prompt text.

        Returns:
            Response with the completion text, token usage and finish reason.
        """
        ...

    def stream(self, prompt: str) -> Iterator[StreamChunk]:
        """
        Generate a completion, yielding text as it arrives.

        Yields:
            StreamChunk objects; the last one carries the full response.
        """
        raise NotImplementedError(f"{self.provider_name} does not support streaming")


class AsyncLanguageModel(Adapter):
    """Abstract base class for asynchronous text completion adapters."""

    @abstractmethod
    async def agenerate(self, prompt: str) -> Response[str]:
        """Generate a completion for the prompt."""
        ...

    async def astream(self, prompt: str) -> AsyncIterator[StreamChunk]:
        """Generate a completion, yielding text as it arrives."""
        raise NotImplementedError(f"{self.provider_name} does not support streaming")
        yield  # pragma: no cover


class TokenCountEstimator(ABC):
    """Mixin for adapters that can estimate prompt size in tokens."""

    @abstractmethod
    def estimate_token_count(self, prompt: str) -> int:
        ...


class EmbeddingModel(Adapter):
    """Abstract base class for embedding adapters."""

    def embed(self, text: str) -> Response[Embedding]:
        """Embed a single text."""
        response = self.embed_all([text])
        return Response(
            content=response.content[0],
            token_usage=response.token_usage,
            finish_reason=response.finish_reason,
        )

    @abstractmethod
    def embed_all(self, texts: list[str]) -> Response[list[Embedding]]:
        """
        Embed several texts.

        Args:
            texts: Texts to embed.

        Returns:
            Response whose content lists one embedding per text, in order.
        """
        ...


class ImageModel(Adapter):
    """Abstract base class for image generation adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> Response[Image]:
        """Generate one image from the prompt."""
        ...


class AdapterError(Exception):
    """Base exception for adapter errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.original_error = original_error


class ConfigurationError(AdapterError):
    """Raised when an adapter cannot be built from the given configuration."""
