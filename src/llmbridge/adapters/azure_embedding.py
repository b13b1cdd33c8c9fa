"""
Azure OpenAI Embedding Model Adapter

Embeddings (e.g. text-embedding-ada-002) from Azure OpenAI Service.
"""

from typing import Any, Optional

import structlog

from llmbridge.adapters.azure_helpers import AzureOpenAiBuilder, token_usage_from
from llmbridge.adapters.base import (
    Capabilities,
    Embedding,
    EmbeddingModel,
    Response,
    TokenUsage,
)

logger = structlog.get_logger(__name__)

DEFAULT_DEPLOYMENT_NAME = "text-embedding-ada-002"
# Azure OpenAI accepts at most 16 inputs per embeddings request
BATCH_SIZE = 16


class AzureOpenAiEmbeddingModel(EmbeddingModel):
    """Azure OpenAI embedding model."""

    provider = "azure"
    capabilities = Capabilities(embeddings=True)

    def __init__(
        self,
        client: Any,
        deployment_name: Optional[str] = None,
        dimensions: Optional[int] = None,
        user: Optional[str] = None,
    ):
        """
        Initialize the embedding model.

        Args:
            client: OpenAI or AzureOpenAI client.
            deployment_name: Embedding deployment. Defaults to text-embedding-ada-002.
            dimensions: Output dimensions, for models that support shortening.
            user: End-user identifier forwarded for abuse monitoring.
        """
        self._client = client
        self._deployment_name = deployment_name or DEFAULT_DEPLOYMENT_NAME
        self._dimensions = dimensions
        self._user = user
        logger.info(
            "embedding_model.created",
            provider=self.provider,
            deployment=self._deployment_name,
        )

    @property
    def deployment_name(self) -> str:
        return self._deployment_name

    def embed_all(self, texts: list[str]) -> Response[list[Embedding]]:
        embeddings: list[Embedding] = []
        token_usage: Optional[TokenUsage] = None

        for start in range(0, len(texts), BATCH_SIZE):
            kwargs: dict[str, Any] = {
                "model": self._deployment_name,
                "input": texts[start:start + BATCH_SIZE],
            }
            if self._dimensions is not None:
                kwargs["dimensions"] = self._dimensions
            if self._user is not None:
                kwargs["user"] = self._user

            result = self._client.embeddings.create(**kwargs)

            for item in sorted(result.data, key=lambda d: d.index):
                embeddings.append(Embedding(vector=list(item.embedding)))

            usage = token_usage_from(result.usage)
            if usage is not None:
                token_usage = usage if token_usage is None else token_usage + usage

        logger.debug(
            "embeddings.generated",
            deployment=self._deployment_name,
            count=len(embeddings),
            token_usage=token_usage,
        )
        return Response(content=embeddings, token_usage=token_usage)

    @classmethod
    def builder(cls) -> "AzureOpenAiEmbeddingModelBuilder":
        return AzureOpenAiEmbeddingModelBuilder()


class AzureOpenAiEmbeddingModelBuilder(AzureOpenAiBuilder):
    """Builder for AzureOpenAiEmbeddingModel."""

    def __init__(self):
        super().__init__()
        self._dimensions: Optional[int] = None
        self._user: Optional[str] = None

    def dimensions(self, dimensions: int):
        self._dimensions = dimensions
        return self

    def user(self, user: str):
        self._user = user
        return self

    def build(self) -> AzureOpenAiEmbeddingModel:
        return AzureOpenAiEmbeddingModel(
            self._client(),
            deployment_name=self._deployment_name,
            dimensions=self._dimensions,
            user=self._user,
        )
