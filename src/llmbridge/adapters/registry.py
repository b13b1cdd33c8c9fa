"""
Adapter Registry

Factory for building LLM provider adapters from Settings.
Provides a unified way to get the adapter configured for a provider.
"""

from typing import Any, Optional

from azure.identity import DefaultAzureCredential

from llmbridge.adapters.anthropic_adapter import AnthropicLanguageModel
from llmbridge.adapters.azure_adapter import AzureOpenAiLanguageModel
from llmbridge.adapters.azure_embedding import AzureOpenAiEmbeddingModel
from llmbridge.adapters.azure_helpers import AzureOpenAiBuilder
from llmbridge.adapters.azure_image import AzureOpenAiImageModel
from llmbridge.adapters.base import (
    ConfigurationError,
    EmbeddingModel,
    ImageModel,
    LanguageModel,
)
from llmbridge.adapters.http import ProxyOptions
from llmbridge.adapters.ollama_adapter import OllamaLanguageModel
from llmbridge.config.settings import Provider, Settings


def _as_provider(value: Any) -> Provider:
    try:
        return Provider(value)
    except ValueError as e:
        raise ConfigurationError(
            message=f"Unknown provider: {value}",
            provider=str(value),
            original_error=e,
        ) from e


class AdapterRegistry:
    """
    Registry for LLM provider adapters.

    Builds adapters on first use and caches them per provider.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the adapter registry.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._language_models: dict[Provider, LanguageModel] = {}
        self._embedding_model: Optional[EmbeddingModel] = None
        self._image_model: Optional[ImageModel] = None

    def language_model(self, provider: Optional[Provider] = None) -> LanguageModel:
        """
        Get the language model for the specified provider.

        Args:
            provider: Provider to get a model for. Defaults to settings.provider.

        Returns:
            LanguageModel instance for the provider.

        Raises:
            ConfigurationError: If required credentials are missing.
        """
        provider = _as_provider(provider or self._settings.provider)

        if provider not in self._language_models:
            self._language_models[provider] = self._create_language_model(provider)
        return self._language_models[provider]

    def embedding_model(self) -> EmbeddingModel:
        """Get the Azure OpenAI embedding model."""
        if self._embedding_model is None:
            builder = self._azure_builder(AzureOpenAiEmbeddingModel.builder())
            self._embedding_model = builder.deployment_name(
                self._settings.azure_openai_embedding_deployment
            ).build()
        return self._embedding_model

    def image_model(self) -> ImageModel:
        """Get the Azure OpenAI image model."""
        if self._image_model is None:
            builder = self._azure_builder(AzureOpenAiImageModel.builder())
            self._image_model = builder.deployment_name(
                self._settings.azure_openai_image_deployment
            ).build()
        return self._image_model

    def _check(self, provider: Provider) -> None:
        errors = self._settings.validate_provider_config(provider)
        if errors:
            raise ConfigurationError(message="; ".join(errors), provider=provider.value)

    def _proxy_options(self) -> Optional[ProxyOptions]:
        if self._settings.proxy_host and self._settings.proxy_port:
            return ProxyOptions(host=self._settings.proxy_host, port=self._settings.proxy_port)
        return None

    def _transport(self, builder: Any) -> Any:
        builder.timeout(self._settings.request_timeout)
        builder.max_retries(self._settings.max_retries)
        builder.log_requests_and_responses(self._settings.log_requests_and_responses)
        proxy_options = self._proxy_options()
        if proxy_options is not None:
            builder.proxy_options(proxy_options)
        return builder

    def _azure_builder(self, builder: AzureOpenAiBuilder) -> Any:
        self._check(Provider.AZURE)
        builder.endpoint(self._settings.azure_openai_endpoint)
        builder.service_version(self._settings.azure_openai_api_version)
        if self._settings.azure_use_entra_id:
            builder.token_credential(DefaultAzureCredential())
        else:
            builder.api_key(self._settings.azure_openai_key)
        return self._transport(builder)

    def _create_language_model(self, provider: Provider) -> LanguageModel:
        """Create a new language model instance."""
        if provider == Provider.AZURE:
            builder = self._azure_builder(AzureOpenAiLanguageModel.builder())
            return builder.deployment_name(self._settings.azure_openai_deployment).build()

        elif provider == Provider.OPENAI:
            self._check(provider)
            builder = AzureOpenAiLanguageModel.builder()
            builder.non_azure_api_key(self._settings.openai_api_key)
            builder.deployment_name(self._settings.openai_model)
            return self._transport(builder).build()

        elif provider == Provider.ANTHROPIC:
            self._check(provider)
            builder = AnthropicLanguageModel.builder()
            builder.api_key(self._settings.anthropic_api_key)
            builder.model_name(self._settings.anthropic_model)
            return self._transport(builder).build()

        elif provider == Provider.OLLAMA:
            builder = OllamaLanguageModel.builder()
            builder.base_url(self._settings.ollama_host)
            builder.model_name(self._settings.ollama_model)
            return self._transport(builder).build()

        raise ConfigurationError(message=f"Unknown provider: {provider}", provider=str(provider))

    def close_all(self) -> None:
        """Close adapters that own a connection pool."""
        for model in self._language_models.values():
            if hasattr(model, "close"):
                model.close()
        self._language_models.clear()


# Global registry instance (initialized with settings)
_registry: Optional[AdapterRegistry] = None


def get_registry(settings: Optional[Settings] = None) -> AdapterRegistry:
    """
    Get the global adapter registry.

    Args:
        settings: Optional settings to use. Defaults to global settings.

    Returns:
        AdapterRegistry instance.
    """
    global _registry
    if _registry is None:
        if settings is None:
            from llmbridge.config.settings import settings as default_settings
            settings = default_settings
        _registry = AdapterRegistry(settings)
    return _registry


def get_language_model(provider: Optional[Provider] = None) -> LanguageModel:
    """
    Convenience function to get a language model.

    Args:
        provider: Provider to get a model for.

    Returns:
        LanguageModel instance.
    """
    return get_registry().language_model(provider)
