"""
Feed source implementations.

This package contains the Source base classes and one implementation per
upstream. Built-in sources have fixed names; CSS page configs found in the
configured directory and RSS URLs from the config add further sources named
after their file stem or config key.

To add a new built-in source:
1. Inherit from Source (or StatefulSource if it tracks seen records)
2. Implement produce_items()
3. Register the class in BUILTIN_SOURCES below
"""

from __future__ import annotations

from pathlib import Path

from ..config import AppConfig, discover_page_configs, load_page_config
from ..core.assembler import hooks_from_names
from ..core.errors import ConfigurationError
from ..state import StateStore
from .apple_security import AppleSecuritySource
from .base import Source, StatefulSource
from .css import CssSource
from .hackerone import HackerOneSource
from .project_zero import ProjectZeroSource
from .project_zero_rca import ProjectZeroRCASource
from .rss import RssSource
from .syzbot import SyzbotSource

BUILTIN_SOURCES: dict[str, type[Source]] = {
    "apple_security": AppleSecuritySource,
    "hackerone": HackerOneSource,
    "project_zero": ProjectZeroSource,
    "project_zero_rca": ProjectZeroRCASource,
    "syzbot": SyzbotSource,
}


def available_sources(cfg: AppConfig) -> dict[str, str]:
    """Map every known source name to its kind ("builtin", "rss", or "css")."""
    names = {name: "builtin" for name in BUILTIN_SOURCES}
    names.update({name: "rss" for name in cfg.sources.rss})
    names.update({name: "css" for name in discover_page_configs(Path(cfg.sources.config_dir))})
    return names


def default_sources(cfg: AppConfig) -> list[str]:
    """Sources run when none is named: enabled built-ins, then RSS, then CSS pages."""
    names = list(cfg.sources.enabled)
    names.extend(cfg.sources.rss)
    names.extend(discover_page_configs(Path(cfg.sources.config_dir)))
    return names


def build_source(name: str, cfg: AppConfig, store: StateStore) -> Source:
    """Construct a source by name with its configured item hooks.

    Raises:
        ConfigurationError: If the name is unknown or its config is invalid
    """
    hook_cfg = cfg.sources.hooks.get(name)
    hooks = hooks_from_names(
        hook_cfg.filters if hook_cfg else None,
        hook_cfg.modifiers if hook_cfg else None,
    )

    source_cls = BUILTIN_SOURCES.get(name)
    if source_cls is not None:
        if issubclass(source_cls, StatefulSource):
            return source_cls(cfg, store, hooks)
        return source_cls(cfg, hooks)

    if name in cfg.sources.rss:
        return RssSource(name, cfg.sources.rss[name], cfg, hooks)

    pages = discover_page_configs(Path(cfg.sources.config_dir))
    if name in pages:
        return CssSource(name, load_page_config(pages[name]), cfg, hooks)

    raise ConfigurationError(f"Missing valid feed type: {name}")


__all__ = [
    "AppleSecuritySource",
    "BUILTIN_SOURCES",
    "CssSource",
    "HackerOneSource",
    "ProjectZeroRCASource",
    "ProjectZeroSource",
    "RssSource",
    "Source",
    "StatefulSource",
    "SyzbotSource",
    "available_sources",
    "build_source",
    "default_sources",
]
