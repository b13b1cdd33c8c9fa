"""
llmbridge Configuration Settings

Centralized configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Provider(str, Enum):
    """Supported LLM providers."""
    AZURE = "azure"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


class Settings(BaseSettings):
    """
    llmbridge Configuration.

    Settings can be configured via environment variables with the
    LLMBRIDGE_ prefix, e.g. LLMBRIDGE_PROVIDER=anthropic. Vendor
    credentials are read from their conventional variable names.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLMBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Core settings
    provider: Provider = Field(
        default=Provider.AZURE,
        description="Default LLM provider"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    # Transport settings forwarded to vendor clients
    request_timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds"
    )
    max_retries: int = Field(default=3, description="Vendor client retry count")
    log_requests_and_responses: bool = Field(
        default=False,
        description="Log every HTTP request and response"
    )
    proxy_host: Optional[str] = Field(default=None, description="HTTP proxy host")
    proxy_port: Optional[int] = Field(default=None, description="HTTP proxy port")

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = Field(
        default=None,
        description="Azure OpenAI endpoint",
        alias="AZURE_OPENAI_ENDPOINT"
    )
    azure_openai_key: Optional[str] = Field(
        default=None,
        description="Azure OpenAI API key",
        alias="AZURE_OPENAI_KEY"
    )
    azure_openai_api_version: str = Field(
        default="2024-02-15-preview",
        description="Azure OpenAI API version"
    )
    azure_use_entra_id: bool = Field(
        default=False,
        description="Authenticate with DefaultAzureCredential instead of a key"
    )
    azure_openai_deployment: str = Field(
        default="gpt-35-turbo-instruct",
        description="Completion deployment name"
    )
    azure_openai_embedding_deployment: str = Field(
        default="text-embedding-ada-002",
        description="Embedding deployment name"
    )
    azure_openai_image_deployment: str = Field(
        default="dall-e-3",
        description="Image generation deployment name"
    )

    # Public OpenAI
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key",
        alias="OPENAI_API_KEY"
    )
    openai_model: str = Field(
        default="gpt-3.5-turbo-instruct",
        description="OpenAI completion model"
    )

    # Anthropic
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key",
        alias="ANTHROPIC_API_KEY"
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-latest",
        description="Anthropic model"
    )

    # Ollama
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama host URL",
        alias="OLLAMA_HOST"
    )
    ollama_model: str = Field(default="llama3.2:1b", description="Ollama model")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    def validate_provider_config(self, provider: Optional[Provider] = None) -> list[str]:
        """Validate that required provider credentials are present."""
        provider = provider or self.provider
        errors = []

        if provider == Provider.AZURE:
            if not self.azure_openai_endpoint:
                errors.append("AZURE_OPENAI_ENDPOINT is required for Azure provider")
            if not self.azure_openai_key and not self.azure_use_entra_id:
                errors.append("AZURE_OPENAI_KEY is required for Azure provider")

        if provider == Provider.OPENAI and not self.openai_api_key:
            errors.append("OPENAI_API_KEY is required for OpenAI provider")

        if provider == Provider.ANTHROPIC and not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is required for Anthropic provider")

        # Ollama doesn't require API keys

        return errors


# Global settings instance
settings = Settings()
