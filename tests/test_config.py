import json
from pathlib import Path

import pytest

from feedwright.config import (
    AppConfig,
    HookConfig,
    discover_page_configs,
    load_config,
    load_page_config,
    page_config_from_dict,
)
from feedwright.core.errors import ConfigurationError


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg == AppConfig()
    assert cfg.fetch.timeout_seconds == 15.0
    assert cfg.sources.hooks["project_zero"].modifiers == ["created_from_updated"]
    assert load_config(None) is not cfg


def test_yaml_overrides_are_merged(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "fetch:",
                "  timeout_seconds: 5",
                "output:",
                "  format: atom",
                "sources:",
                "  enabled: [syzbot]",
                "  rss:",
                "    lwn: https://lwn.net/headlines/rss",
                "  hooks:",
                "    lwn:",
                "      filters: [require_link]",
                "ignored_section:",
                "  anything: 1",
            ]
        ),
        encoding="utf-8",
    )
    cfg = load_config(str(path))

    assert cfg.fetch.timeout_seconds == 5
    assert cfg.fetch.user_agent == "feedwright/0.1"
    assert cfg.output.format == "atom"
    assert cfg.output.directory == "./rss_output"
    assert cfg.sources.enabled == ["syzbot"]
    assert cfg.sources.rss == {"lwn": "https://lwn.net/headlines/rss"}
    assert cfg.sources.hooks == {"lwn": HookConfig(filters=["require_link"])}


def test_unknown_option_is_configuration_error(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("fetch:\n  retries: 3\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_non_mapping_config_is_rejected(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_page_config_from_dict():
    page = page_config_from_dict(
        {
            "url": "https://example.com/news",
            "item_selectors": {
                "container": "li.item",
                "title": "a",
                "link": "a",
                "created": "time",
                "created_format": "%d %b %Y",
            },
        }
    )
    assert page.title == "https://example.com/news"
    assert page.field_map.container.text == "li.item"
    assert page.field_map.created_format == "%d %b %Y"
    assert page.field_map.author is None


@pytest.mark.parametrize(
    "data",
    [
        {"item_selectors": {"container": "li"}},
        {"url": "https://x", "item_selectors": {}},
        {"url": "https://x", "item_selectors": {"container": "li", "title": "a["}},
        {"url": "https://x", "item_selectors": {"container": "li", "headline": "h1"}},
    ],
)
def test_invalid_page_configs(data):
    with pytest.raises(ConfigurationError):
        page_config_from_dict(data)


def test_load_page_config_json_and_yaml(tmp_path: Path):
    json_path = tmp_path / "blog.json"
    json_path.write_text(
        json.dumps({"url": "https://a.example", "title": "A", "item_selectors": {"container": "article"}}),
        encoding="utf-8",
    )
    yaml_path = tmp_path / "news.yaml"
    yaml_path.write_text(
        "url: https://b.example\nitem_selectors:\n  container: li\n  title: h3\n", encoding="utf-8"
    )

    assert load_page_config(json_path).title == "A"
    assert load_page_config(yaml_path).field_map.title.text == "h3"


def test_load_page_config_bad_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_page_config(path)


def test_discover_page_configs(tmp_path: Path):
    for name in ("b.yaml", "a.json", "c.yml", "notes.txt"):
        (tmp_path / name).write_text("{}", encoding="utf-8")
    found = discover_page_configs(tmp_path)
    assert list(found) == ["a", "b", "c"]
    assert discover_page_configs(tmp_path / "missing") == {}
