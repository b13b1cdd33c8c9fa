"""Configuration module."""

from llmbridge.config.settings import Provider, Settings, settings

__all__ = ["Settings", "settings", "Provider"]
