"""
Configuration management using YAML files and dataclasses.

This module defines the application configuration and the per-page selector
configuration used by CSS sources. Application config sections:
- FetchConfig: HTTP fetching settings
- StateConfig: Working directory for persisted reconciliation state
- OutputConfig: Feed format and output directory
- LoggingConfig: Logging behavior
- SourcesConfig: Which sources run and which item hooks they get
- AppConfig: Root configuration container

Page configs (one JSON or YAML file per scraped page) are loaded with
``load_page_config`` and compiled immediately, so a malformed selector is
reported before anything is fetched.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
from pathlib import Path
from typing import Any

import yaml

from .core.errors import ConfigurationError
from .core.extractor import FieldMap


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        timeout_seconds: Per-request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 15.0
    trust_env: bool = True
    user_agent: str = "feedwright/0.1"


@dataclass
class StateConfig:
    """Configuration for persisted reconciliation state.

    Attributes:
        workdir: Directory holding ``<source>.state.json`` files
        max_recent: Length cap for recency-bounded sources
    """

    workdir: str = "./workdir"
    max_recent: int = 20


@dataclass
class OutputConfig:
    """Configuration for feed output.

    Attributes:
        format: "rss", "atom", or "json"
        directory: Where ``<source>.<format>`` files are written
    """

    format: str = "rss"
    directory: str = "./rss_output"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Log file path, relative to the output directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "feedwright.jsonl"


@dataclass
class HookConfig:
    """Named item hooks for one source."""

    filters: list[str] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)


@dataclass
class SourcesConfig:
    """Configuration for which sources run.

    Attributes:
        enabled: Built-in source names run by ``feedwright run``
        config_dir: Directory of CSS page configs; each file becomes a source
        rss: Mapping of source name to upstream RSS/Atom URL
        hooks: Per-source item hooks, by source name
        project_zero_token: Optional static token header for the tracker API
    """

    enabled: list[str] = field(
        default_factory=lambda: ["hackerone", "project_zero", "project_zero_rca", "syzbot"]
    )
    config_dir: str = "./configs"
    rss: dict[str, str] = field(default_factory=dict)
    hooks: dict[str, HookConfig] = field(
        default_factory=lambda: {"project_zero": HookConfig(modifiers=["created_from_updated"])}
    )
    project_zero_token: str | None = None


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    state: StateConfig = field(default_factory=StateConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    try:
        sources = dict(data["sources"])
        sources["hooks"] = {
            name: HookConfig(**(hooks or {}))
            for name, hooks in (sources.get("hooks") or {}).items()
        }
        return AppConfig(
            fetch=FetchConfig(**data["fetch"]),
            state=StateConfig(**data["state"]),
            output=OutputConfig(**data["output"]),
            logging=LoggingConfig(**data["logging"]),
            sources=SourcesConfig(**sources),
        )
    except TypeError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@dataclass(frozen=True)
class PageConfig:
    """A scraped page: where it lives, what to call it, how to read it.

    Attributes:
        url: Page address, also the base for relative links
        title: Feed title
        field_map: Compiled selectors
    """

    url: str
    title: str
    field_map: FieldMap


_SELECTOR_KEYS = ("title", "link", "author", "description", "id", "created", "updated", "content")


def page_config_from_dict(data: dict[str, Any]) -> PageConfig:
    """Build a PageConfig from its declarative form.

    The expected shape::

        {
            "url": "https://example.com/blog",
            "title": "Example Blog",
            "item_selectors": {
                "container": "article.post",
                "title": "h2",
                "link": "h2 a",
                "created": "time",
                "created_format": "%Y-%m-%d"
            }
        }

    Raises:
        ConfigurationError: On a missing url, container, or bad selector
    """
    url = data.get("url")
    if not url:
        raise ConfigurationError("No url has been set for this page")
    selectors = data.get("item_selectors") or {}
    unknown = set(selectors) - set(_SELECTOR_KEYS) - {"container", "created_format", "updated_format"}
    if unknown:
        raise ConfigurationError(f"Unknown selector name: {', '.join(sorted(unknown))}")
    field_map = FieldMap.from_strings(
        container=selectors.get("container", ""),
        created_format=selectors.get("created_format", ""),
        updated_format=selectors.get("updated_format", ""),
        **{key: selectors.get(key) for key in _SELECTOR_KEYS},
    )
    return PageConfig(url=url, title=data.get("title") or url, field_map=field_map)


def load_page_config(path: Path) -> PageConfig:
    """Load a page config from a JSON or YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
        if Path(path).suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to load page config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Page config {path} must contain a mapping")
    return page_config_from_dict(data)


def discover_page_configs(config_dir: Path) -> dict[str, Path]:
    """Map source name (file stem) to page config path for a directory."""
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        return {}
    found: dict[str, Path] = {}
    for path in sorted(config_dir.iterdir()):
        if path.suffix.lower() in (".json", ".yaml", ".yml") and path.is_file():
            found[path.stem] = path
    return found
