"""Configuration for switchbooks."""

from switchbooks.config.logging import configure_logging, get_logger
from switchbooks.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging", "get_logger"]
