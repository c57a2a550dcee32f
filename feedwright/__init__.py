"""
feedwright: build RSS, Atom and JSON feeds for sites that do not publish one.

Pages are scraped with declarative CSS selectors or read from their APIs,
reconciled against per-source JSON state so that items keep stable dates
across runs, and written out as feed documents.
"""

__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.errors import FeedwrightError
from .core.types import Feed, FeedItem

__all__ = ["AppConfig", "Feed", "FeedItem", "FeedwrightError", "__version__", "load_config"]
