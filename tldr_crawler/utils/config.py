"""
Configuration management for the crawler.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml


DEFAULT_URL = "https://hackernoon.com/"
DEFAULT_TITLE_SELECTOR = 'main[class^="Page__Content"] h2 a'
DEFAULT_DESCRIPTION_SELECTOR = "div.tldr"
DEFAULT_USER_AGENT = "tldr-crawler/1.0 (+https://github.com/tldr-crawler)"


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    url: str = DEFAULT_URL
    title_selector: str = DEFAULT_TITLE_SELECTOR
    description_selector: str = DEFAULT_DESCRIPTION_SELECTOR
    concurrency: int = 3
    request_timeout: float = 30
    user_agent: str = DEFAULT_USER_AGENT
    fail_fast: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(cls, data: Optional[Dict[str, Any]], name: str):
    """Build a config section, rejecting keys the dataclass does not know."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")
    return cls(**data)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Load configuration from the YAML file, if any, then apply overrides.

        Args:
            overrides: crawler or logging field values taking precedence
                over the file; ``None`` values are ignored

        Returns:
            The validated configuration
        """
        config_data: Dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
            with open(self.config_path, 'r') as file:
                try:
                    config_data = yaml.safe_load(file) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(config_data, dict):
                raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

        self._config = Config(
            crawler=_section(CrawlerConfig, config_data.get('crawler'), 'crawler'),
            logging=_section(LoggingConfig, config_data.get('logging'), 'logging')
        )

        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if hasattr(self._config.crawler, key):
                setattr(self._config.crawler, key, value)
            elif hasattr(self._config.logging, key):
                setattr(self._config.logging, key, value)
            else:
                raise ValueError(f"Unknown configuration override: {key}")

        self._validate_config()
        return self._config

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")

        crawler = self._config.crawler

        parsed = urlparse(crawler.url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL: {crawler.url!r}")

        if not crawler.title_selector or not crawler.description_selector:
            raise ValueError("title_selector and description_selector must not be empty")

        if (not isinstance(crawler.concurrency, int) or isinstance(crawler.concurrency, bool)
                or crawler.concurrency < 1):
            raise ValueError("concurrency must be at least 1")

        if (not isinstance(crawler.request_timeout, (int, float))
                or isinstance(crawler.request_timeout, bool) or crawler.request_timeout <= 0):
            raise ValueError("request_timeout must be positive")

        if not isinstance(crawler.fail_fast, bool):
            raise ValueError(f"fail_fast must be true or false, got {crawler.fail_fast!r}")

        if not isinstance(self._config.logging.json, bool):
            raise ValueError(f"logging.json must be true or false, got {self._config.logging.json!r}")

        level = self._config.logging.level
        if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
            raise ValueError(f"Unknown log level: {self._config.logging.level}")

        logging.getLogger(__name__).debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: Optional[str] = None,
                overrides: Optional[Dict[str, Any]] = None) -> Config:
    """Load configuration from an optional YAML file plus overrides."""
    return ConfigManager(config_path).load_config(overrides)
