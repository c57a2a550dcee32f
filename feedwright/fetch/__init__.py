"""
HTTP fetching for sources.
"""

from .fetcher import FetchResult, decode_json, get_url, post_json

__all__ = ["FetchResult", "decode_json", "get_url", "post_json"]
