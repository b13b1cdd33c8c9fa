"""
HTTP Transport Options

Proxy settings and request/response logging hooks shared by the adapters
that hand an httpx client to their vendor SDK.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, Union
from urllib.parse import quote

import httpx
import structlog

logger = structlog.get_logger(__name__)

REDACTED_HEADERS = {"api-key", "authorization", "x-api-key"}


@dataclass(frozen=True)
class ProxyOptions:
    """Outbound HTTP proxy."""
    host: str
    port: int
    scheme: str = "http"
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def url(self) -> str:
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"{self.scheme}://{credentials}{self.host}:{self.port}"


def to_seconds(timeout: Union[float, timedelta, None]) -> Optional[float]:
    """Normalize a timeout given as seconds or a timedelta."""
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return timeout


def _headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        k: ("***" if k.lower() in REDACTED_HEADERS else v)
        for k, v in headers.items()
    }


def log_request(request: httpx.Request) -> None:
    logger.info(
        "http.request",
        method=request.method,
        url=str(request.url),
        headers=_headers(request.headers),
    )


def log_response(response: httpx.Response) -> None:
    logger.info(
        "http.response",
        method=response.request.method,
        url=str(response.request.url),
        status_code=response.status_code,
        headers=_headers(response.headers),
    )


async def alog_request(request: httpx.Request) -> None:
    log_request(request)


async def alog_response(response: httpx.Response) -> None:
    log_response(response)


def http_client_kwargs(
    proxy_options: Optional[ProxyOptions] = None,
    log_requests_and_responses: bool = False,
    async_client: bool = False,
) -> Optional[dict[str, Any]]:
    """
    Build keyword arguments for an httpx client.

    Returns:
        Keyword arguments, or None when the SDK default client will do.
    """
    if proxy_options is None and not log_requests_and_responses:
        return None

    kwargs: dict[str, Any] = {}
    if proxy_options is not None:
        kwargs["proxy"] = proxy_options.url
    if log_requests_and_responses:
        hooks: tuple[Callable, Callable] = (
            (alog_request, alog_response) if async_client else (log_request, log_response)
        )
        kwargs["event_hooks"] = {"request": [hooks[0]], "response": [hooks[1]]}
    return kwargs
