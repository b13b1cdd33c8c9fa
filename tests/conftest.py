"""
llmbridge Test Configuration and Fixtures
"""

import os
from types import SimpleNamespace

import pytest

# Keep developer credentials out of the tests before importing modules
for _var in (
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OLLAMA_HOST",
):
    os.environ.pop(_var, None)
os.environ["LLMBRIDGE_PROVIDER"] = "ollama"


class WordTokenizer:
    """Counts whitespace-separated words; stands in for tiktoken."""

    def estimate_token_count_in_text(self, text: str) -> int:
        return len(text.split())


@pytest.fixture
def word_tokenizer():
    return WordTokenizer()


@pytest.fixture
def mock_settings():
    """Settings with every provider configured."""
    from llmbridge.config.settings import Settings

    return Settings(
        provider="ollama",
        azure_openai_endpoint="https://test.openai.azure.com/",
        azure_openai_key="azure-test-key",
        openai_api_key="openai-test-key",
        anthropic_api_key="anthropic-test-key",
        ollama_host="http://localhost:11434",
    )


@pytest.fixture
def bare_settings():
    """Settings with no credentials at all."""
    from llmbridge.config.settings import Settings

    return Settings(provider="ollama")


def make_completions(text="Hello!", finish_reason="stop", usage=(5, 2, 7)):
    """Build an object shaped like openai's Completion."""
    return SimpleNamespace(
        id="cmpl-test",
        choices=[SimpleNamespace(index=0, text=text, finish_reason=finish_reason)],
        usage=SimpleNamespace(
            prompt_tokens=usage[0],
            completion_tokens=usage[1],
            total_tokens=usage[2],
        ) if usage else None,
    )


def make_chunk(text=None, finish_reason=None, choices=True, usage=None):
    """Build an object shaped like a streamed openai Completion chunk."""
    return SimpleNamespace(
        choices=[SimpleNamespace(index=0, text=text, finish_reason=finish_reason)]
        if choices else [],
        usage=usage,
    )


@pytest.fixture
def completions_factory():
    return make_completions


@pytest.fixture
def chunk_factory():
    return make_chunk


class FakeStream:
    """Iterable chunk stream that records whether it was closed, like openai.Stream."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def __iter__(self):
        return iter(self._chunks)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


class FakeAsyncStream:
    """Async counterpart of FakeStream, like openai.AsyncStream."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True


@pytest.fixture
def stream_factory():
    return FakeStream


@pytest.fixture
def async_stream_factory():
    return FakeAsyncStream
