"""Configuration management for cmdgate.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for ports and API keys.
"""

from cmdgate.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
