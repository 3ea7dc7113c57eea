import pytest

from tldr_crawler.utils.config import (
    ConfigManager,
    DEFAULT_DESCRIPTION_SELECTOR,
    DEFAULT_TITLE_SELECTOR,
    DEFAULT_URL,
    load_config,
)


def write_config(tmp_path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults_without_file():
    config = load_config()
    assert config.crawler.url == DEFAULT_URL
    assert config.crawler.title_selector == DEFAULT_TITLE_SELECTOR
    assert config.crawler.description_selector == DEFAULT_DESCRIPTION_SELECTOR
    assert config.crawler.concurrency == 3
    assert config.crawler.fail_fast is True
    assert config.logging.level == "INFO"
    assert config.logging.file is None


def test_yaml_file_overrides_defaults(tmp_path):
    path = write_config(tmp_path, """
crawler:
  url: "https://example.com/blog/"
  concurrency: 5
  fail_fast: false
logging:
  level: DEBUG
  json: true
""")
    config = load_config(path)
    assert config.crawler.url == "https://example.com/blog/"
    assert config.crawler.concurrency == 5
    assert config.crawler.fail_fast is False
    assert config.crawler.title_selector == DEFAULT_TITLE_SELECTOR
    assert config.logging.level == "DEBUG"
    assert config.logging.json is True


def test_overrides_take_precedence_and_none_is_ignored(tmp_path):
    path = write_config(tmp_path, "crawler:\n  concurrency: 5\n  url: https://a.test/\n")
    config = load_config(path, {"concurrency": 8, "url": None, "level": "warning"})
    assert config.crawler.concurrency == 8
    assert config.crawler.url == "https://a.test/"
    assert config.logging.level == "warning"


def test_empty_file_gives_defaults(tmp_path):
    config = load_config(write_config(tmp_path, ""))
    assert config.crawler.url == DEFAULT_URL


@pytest.mark.parametrize("overrides, message", [
    ({"concurrency": 0}, "concurrency must be at least 1"),
    ({"url": "example.com/blog"}, "absolute http"),
    ({"url": "ftp://example.com/"}, "absolute http"),
    ({"title_selector": ""}, "must not be empty"),
    ({"request_timeout": 0}, "request_timeout"),
    ({"level": "LOUD"}, "Unknown log level"),
    ({"colour": "red"}, "Unknown configuration override"),
])
def test_invalid_values(overrides, message):
    with pytest.raises(ValueError, match=message):
        load_config(None, overrides)


def test_unknown_key_in_file(tmp_path):
    path = write_config(tmp_path, "crawler:\n  max_depth: 3\n")
    with pytest.raises(ValueError, match="max_depth"):
        load_config(path)


def test_invalid_yaml(tmp_path):
    path = write_config(tmp_path, "crawler: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_config_property_before_load():
    with pytest.raises(ValueError):
        ConfigManager().config


@pytest.mark.parametrize("text, message", [
    ("logging:\n  level: 10\n", "Unknown log level"),
    ("crawler:\n  fail_fast: \"false\"\n", "fail_fast must be true or false"),
    ("crawler:\n  concurrency: true\n", "concurrency must be at least 1"),
    ("crawler:\n  request_timeout: soon\n", "request_timeout must be positive"),
    ("logging:\n  json: \"yes\"\n", "logging.json must be true or false"),
])
def test_wrongly_typed_yaml_values(tmp_path, text, message):
    with pytest.raises(ValueError, match=message):
        load_config(write_config(tmp_path, text))
