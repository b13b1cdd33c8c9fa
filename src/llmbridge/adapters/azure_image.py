"""
Azure OpenAI Image Model Adapter

Image generation (e.g. dall-e-3) from Azure OpenAI Service.
"""

from typing import Any, Optional

import structlog

from llmbridge.adapters.azure_helpers import AzureOpenAiBuilder
from llmbridge.adapters.base import Capabilities, Image, ImageModel, Response

logger = structlog.get_logger(__name__)

DEFAULT_DEPLOYMENT_NAME = "dall-e-3"
DEFAULT_SIZE = "1024x1024"
DEFAULT_QUALITY = "standard"
DEFAULT_STYLE = "vivid"
DEFAULT_RESPONSE_FORMAT = "url"


class AzureOpenAiImageModel(ImageModel):
    """Azure OpenAI image generation model."""

    provider = "azure"
    capabilities = Capabilities(image_generation=True)

    def __init__(
        self,
        client: Any,
        deployment_name: Optional[str] = None,
        size: Optional[str] = None,
        quality: Optional[str] = None,
        style: Optional[str] = None,
        response_format: Optional[str] = None,
        user: Optional[str] = None,
    ):
        self._client = client
        self._deployment_name = deployment_name or DEFAULT_DEPLOYMENT_NAME
        self._size = size or DEFAULT_SIZE
        self._quality = quality or DEFAULT_QUALITY
        self._style = style or DEFAULT_STYLE
        self._response_format = response_format or DEFAULT_RESPONSE_FORMAT
        self._user = user
        logger.info(
            "image_model.created",
            provider=self.provider,
            deployment=self._deployment_name,
        )

    def generate(self, prompt: str) -> Response[Image]:
        kwargs: dict[str, Any] = {
            "model": self._deployment_name,
            "prompt": prompt,
            "n": 1,
            "size": self._size,
            "quality": self._quality,
            "style": self._style,
            "response_format": self._response_format,
        }
        if self._user is not None:
            kwargs["user"] = self._user

        result = self._client.images.generate(**kwargs)
        data = result.data[0]

        logger.debug("image.generated", deployment=self._deployment_name)
        return Response(
            content=Image(
                url=data.url,
                base64_data=data.b64_json,
                revised_prompt=data.revised_prompt,
            )
        )

    @classmethod
    def builder(cls) -> "AzureOpenAiImageModelBuilder":
        return AzureOpenAiImageModelBuilder()


class AzureOpenAiImageModelBuilder(AzureOpenAiBuilder):
    """Builder for AzureOpenAiImageModel."""

    def __init__(self):
        super().__init__()
        self._size: Optional[str] = None
        self._quality: Optional[str] = None
        self._style: Optional[str] = None
        self._response_format: Optional[str] = None
        self._user: Optional[str] = None

    def size(self, size: str):
        """Image size, e.g. 1024x1024, 1792x1024 or 1024x1792."""
        self._size = size
        return self

    def quality(self, quality: str):
        """standard or hd."""
        self._quality = quality
        return self

    def style(self, style: str):
        """vivid or natural."""
        self._style = style
        return self

    def response_format(self, response_format: str):
        """url or b64_json."""
        self._response_format = response_format
        return self

    def user(self, user: str):
        self._user = user
        return self

    def build(self) -> AzureOpenAiImageModel:
        return AzureOpenAiImageModel(
            self._client(),
            deployment_name=self._deployment_name,
            size=self._size,
            quality=self._quality,
            style=self._style,
            response_format=self._response_format,
            user=self._user,
        )
