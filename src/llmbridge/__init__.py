"""
llmbridge: LLM Provider Adapters

Thin adapters that wrap individual LLM vendor SDKs behind a shared
language, embedding and image model interface.
"""

__version__ = "0.1.0"

from llmbridge.config.settings import Settings

__all__ = ["Settings", "__version__"]
