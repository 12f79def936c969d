"""Configuration management for Panel Monitor."""

from panel_monitor.config.schema import AppConfig
from panel_monitor.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
