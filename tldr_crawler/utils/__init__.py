"""
Configuration and logging utilities.
"""

from .config import Config, ConfigManager, CrawlerConfig, LoggingConfig, load_config

__all__ = ['Config', 'ConfigManager', 'CrawlerConfig', 'LoggingConfig', 'load_config']
