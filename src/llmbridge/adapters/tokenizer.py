"""
Tokenizers

Local token counting for OpenAI-family models, backed by tiktoken.
"""

from typing import Optional, Protocol

import tiktoken


class Tokenizer(Protocol):
    """Anything that can count the tokens in a piece of text."""

    def estimate_token_count_in_text(self, text: str) -> int:
        ...


class OpenAiTokenizer:
    """
    Tokenizer for OpenAI models.

    The encoding is resolved from the model name on first use, so building
    a tokenizer never downloads BPE files.
    """

    def __init__(self, model_name: str = "gpt-3.5-turbo-instruct"):
        self.model_name = model_name
        self._encoding: Optional[tiktoken.Encoding] = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self.model_name)
            except KeyError:
                # Unknown or Azure-specific names (e.g. gpt-35-turbo)
                self._encoding = tiktoken.get_encoding("cl100k_base")
        return self._encoding

    def estimate_token_count_in_text(self, text: str) -> int:
        return len(self.encoding.encode(text or ""))
