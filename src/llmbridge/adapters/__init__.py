"""
LLM Provider Adapters

Thin wrappers that put one vendor SDK each behind a shared interface:
- Azure OpenAI (completions, streaming, async, embeddings, images)
- Anthropic (Claude)
- Ollama (local)
"""

from llmbridge.adapters.anthropic_adapter import AnthropicLanguageModel
from llmbridge.adapters.azure_adapter import (
    AsyncAzureOpenAiLanguageModel,
    AzureOpenAiLanguageModel,
)
from llmbridge.adapters.azure_embedding import AzureOpenAiEmbeddingModel
from llmbridge.adapters.azure_image import AzureOpenAiImageModel
from llmbridge.adapters.base import (
    AdapterError,
    AsyncLanguageModel,
    Capabilities,
    ConfigurationError,
    Embedding,
    EmbeddingModel,
    FinishReason,
    Image,
    ImageModel,
    LanguageModel,
    Response,
    StreamChunk,
    TokenCountEstimator,
    TokenUsage,
)
from llmbridge.adapters.http import ProxyOptions
from llmbridge.adapters.ollama_adapter import OllamaLanguageModel
from llmbridge.adapters.registry import AdapterRegistry, get_language_model, get_registry
from llmbridge.adapters.tokenizer import OpenAiTokenizer, Tokenizer

# Every adapter class, in documentation order
ADAPTERS = (
    AzureOpenAiLanguageModel,
    AsyncAzureOpenAiLanguageModel,
    AzureOpenAiEmbeddingModel,
    AzureOpenAiImageModel,
    AnthropicLanguageModel,
    OllamaLanguageModel,
)

__all__ = [
    "ADAPTERS",
    "AdapterError",
    "AdapterRegistry",
    "AnthropicLanguageModel",
    "AsyncAzureOpenAiLanguageModel",
    "AsyncLanguageModel",
    "AzureOpenAiEmbeddingModel",
    "AzureOpenAiImageModel",
    "AzureOpenAiLanguageModel",
    "Capabilities",
    "ConfigurationError",
    "Embedding",
    "EmbeddingModel",
    "FinishReason",
    "Image",
    "ImageModel",
    "LanguageModel",
    "OllamaLanguageModel",
    "OpenAiTokenizer",
    "ProxyOptions",
    "Response",
    "StreamChunk",
    "TokenCountEstimator",
    "TokenUsage",
    "Tokenizer",
    "get_language_model",
    "get_registry",
]
