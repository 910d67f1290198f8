"""Configuration module for cashflow insights."""

from cashflow_insights.config.logging import configure_logging, get_logger
from cashflow_insights.config.settings import AnalyzerConfig, Settings, get_settings

__all__ = ["AnalyzerConfig", "Settings", "get_settings", "configure_logging", "get_logger"]
