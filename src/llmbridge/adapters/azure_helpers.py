"""
Azure OpenAI Client Helpers

Client construction and response mapping shared by the Azure OpenAI
language, embedding and image adapters.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union

import structlog
from azure.core.credentials import AzureKeyCredential, TokenCredential
from azure.core.credentials_async import AsyncTokenCredential
from azure.identity import get_bearer_token_provider
from azure.identity.aio import get_bearer_token_provider as get_async_bearer_token_provider
from openai import (
    AsyncAzureOpenAI,
    AsyncOpenAI,
    AzureOpenAI,
    DefaultAsyncHttpxClient,
    DefaultHttpxClient,
    OpenAI,
)

from llmbridge.adapters.base import ConfigurationError, FinishReason, TokenUsage
from llmbridge.adapters.http import ProxyOptions, http_client_kwargs, to_seconds

logger = structlog.get_logger(__name__)

PROVIDER = "azure"
DEFAULT_SERVICE_VERSION = "2024-02-15-preview"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3
OPENAI_ENDPOINT = "https://api.openai.com/v1"
COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"

OpenAiClient = Union[OpenAI, AzureOpenAI]
AsyncOpenAiClient = Union[AsyncOpenAI, AsyncAzureOpenAI]

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_EXECUTION,
    "function_call": FinishReason.TOOL_EXECUTION,
    "content_filter": FinishReason.CONTENT_FILTER,
}


@dataclass(frozen=True)
class ClientOptions:
    """Connection settings forwarded to the OpenAI client."""
    endpoint: Optional[str] = None
    service_version: Optional[str] = None
    timeout: Optional[float] = None
    max_retries: Optional[int] = None
    proxy_options: Optional[ProxyOptions] = None
    log_requests_and_responses: bool = False


def setup_openai_client(
    options: ClientOptions,
    *,
    api_key: Optional[str] = None,
    key_credential: Optional[AzureKeyCredential] = None,
    token_credential: Optional[Union[TokenCredential, AsyncTokenCredential]] = None,
    async_client: bool = False,
) -> Union[OpenAiClient, AsyncOpenAiClient]:
    """
    Build an OpenAI client for Azure OpenAI or the public OpenAI service.

    Exactly one of the credentials is used, in this order of precedence:
    an Entra ID token credential, a non-Azure OpenAI key credential, an
    Azure OpenAI API key.

    Args:
        options: Endpoint and transport settings.
        api_key: Azure OpenAI API key.
        key_credential: Key for the public OpenAI service.
        token_credential: Entra ID credential, e.g. DefaultAzureCredential.
            The async client expects one from azure.identity.aio.
        async_client: Build the asyncio flavour of the client.

    Returns:
        The configured vendor client.

    Raises:
        ConfigurationError: If the endpoint or every credential is missing.
    """
    if not options.endpoint:
        raise ConfigurationError(
            message="endpoint is required for Azure OpenAI",
            provider=PROVIDER,
        )
    if token_credential is None and key_credential is None and not api_key:
        raise ConfigurationError(
            message="one of api_key, non_azure_api_key or token_credential is required",
            provider=PROVIDER,
        )

    timeout = options.timeout if options.timeout is not None else DEFAULT_TIMEOUT
    max_retries = (
        options.max_retries if options.max_retries is not None else DEFAULT_MAX_RETRIES
    )

    common: dict[str, Any] = {
        "timeout": timeout,
        "max_retries": max_retries,
    }
    http_kwargs = http_client_kwargs(
        options.proxy_options,
        options.log_requests_and_responses,
        async_client=async_client,
    )
    if http_kwargs is not None:
        http_client_cls = DefaultAsyncHttpxClient if async_client else DefaultHttpxClient
        common["http_client"] = http_client_cls(**http_kwargs)

    if key_credential is not None and token_credential is None:
        client_cls = AsyncOpenAI if async_client else OpenAI
        client = client_cls(
            api_key=key_credential.key,
            base_url=options.endpoint,
            **common,
        )
        auth = "openai_key"
    else:
        client_cls = AsyncAzureOpenAI if async_client else AzureOpenAI
        if token_credential is not None:
            token_provider = (
                get_async_bearer_token_provider if async_client else get_bearer_token_provider
            )
            common["azure_ad_token_provider"] = token_provider(
                token_credential, COGNITIVE_SERVICES_SCOPE
            )
            auth = "entra_id"
        else:
            common["api_key"] = api_key
            auth = "api_key"
        client = client_cls(
            azure_endpoint=options.endpoint,
            api_version=options.service_version or DEFAULT_SERVICE_VERSION,
            **common,
        )

    logger.debug(
        "openai_client.created",
        endpoint=options.endpoint,
        auth=auth,
        timeout=timeout,
        max_retries=max_retries,
        async_client=async_client,
    )
    return client


def token_usage_from(usage: Any) -> Optional[TokenUsage]:
    """Map an OpenAI usage object onto TokenUsage."""
    if usage is None:
        return None
    return TokenUsage(
        input_token_count=getattr(usage, "prompt_tokens", None),
        output_token_count=getattr(usage, "completion_tokens", None),
        total_token_count=getattr(usage, "total_tokens", None),
    )


def finish_reason_from(finish_reason: Optional[str]) -> Optional[FinishReason]:
    """Map an OpenAI finish reason string onto FinishReason."""
    if finish_reason is None:
        return None
    return _FINISH_REASONS.get(finish_reason)


class AzureOpenAiBuilder:
    """
    Fluent setters shared by every Azure OpenAI adapter builder.

    Subclasses add their model-specific setters and a build() method.
    """

    def __init__(self):
        self._endpoint: Optional[str] = None
        self._service_version: Optional[str] = None
        self._api_key: Optional[str] = None
        self._key_credential: Optional[AzureKeyCredential] = None
        self._token_credential: Optional[Union[TokenCredential, AsyncTokenCredential]] = None
        self._deployment_name: Optional[str] = None
        self._timeout: Optional[float] = None
        self._max_retries: Optional[int] = None
        self._proxy_options: Optional[ProxyOptions] = None
        self._log_requests_and_responses = False
        self._openai_client: Any = None

    def endpoint(self, endpoint: str):
        """Set the endpoint, e.g. https://{resource}.openai.azure.com/."""
        self._endpoint = endpoint
        return self

    def service_version(self, service_version: str):
        """Set the Azure OpenAI API version, e.g. 2024-02-15-preview."""
        self._service_version = service_version
        return self

    def api_key(self, api_key: str):
        """Authenticate with an Azure OpenAI API key."""
        self._api_key = api_key
        return self

    def non_azure_api_key(self, non_azure_api_key: str):
        """
        Authenticate with the public OpenAI service instead of Azure OpenAI.

        Also points the endpoint at https://api.openai.com/v1.
        """
        self._key_credential = AzureKeyCredential(non_azure_api_key)
        self._endpoint = OPENAI_ENDPOINT
        return self

    def token_credential(
        self, token_credential: Union[TokenCredential, AsyncTokenCredential]
    ):
        """
        Authenticate with Microsoft Entra ID credentials.

        Use an azure.identity.aio credential with build_async().
        """
        self._token_credential = token_credential
        return self

    def deployment_name(self, deployment_name: str):
        self._deployment_name = deployment_name
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

    def openai_client(self, openai_client: Any):
        """Use a pre-built OpenAI client; connection setters are then ignored."""
        self._openai_client = openai_client
        return self

    def _client_options(self) -> ClientOptions:
        return ClientOptions(
            endpoint=self._endpoint,
            service_version=self._service_version,
            timeout=self._timeout,
            max_retries=self._max_retries,
            proxy_options=self._proxy_options,
            log_requests_and_responses=self._log_requests_and_responses,
        )

    def _client(self, async_client: bool = False) -> Any:
        if self._openai_client is not None:
            return self._openai_client
        return setup_openai_client(
            self._client_options(),
            api_key=self._api_key,
            key_credential=self._key_credential,
            token_credential=self._token_credential,
            async_client=async_client,
        )
