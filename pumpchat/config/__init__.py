"""Configuration primitives for the pump.fun chat client."""

from .settings import ChatSettings, get_settings

__all__ = ["ChatSettings", "get_settings"]
