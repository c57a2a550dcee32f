"""
Feed document writers (RSS 2.0, Atom 1.0, JSON Feed 1.1).
"""

from .writers import FORMATS, output_path, render_feed, write_feed

__all__ = ["FORMATS", "output_path", "render_feed", "write_feed"]
