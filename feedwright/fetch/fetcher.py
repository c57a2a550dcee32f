"""
HTTP transport for sources.

Thin synchronous wrappers over httpx. Every request has a bounded timeout,
follows redirects, and turns network failures or non-2xx responses into
TransportError. There are no retries: a failed request fails the source's
run and nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any

import httpx

from ..config import FetchConfig
from ..core.errors import ParseError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """A successful HTTP response.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code (always 2xx)
        content: Raw response body
        text: Decoded response body
    """

    url: str
    status_code: int
    content: bytes
    text: str


def _client(cfg: FetchConfig, headers: dict[str, str] | None = None) -> httpx.Client:
    merged = {"User-Agent": cfg.user_agent}
    merged.update(headers or {})
    return httpx.Client(
        timeout=cfg.timeout_seconds,
        headers=merged,
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


def _send(
    method: str,
    url: str,
    cfg: FetchConfig,
    headers: dict[str, str] | None = None,
    body: bytes | None = None,
) -> FetchResult:
    logger.debug("%s %s", method, url)
    try:
        with _client(cfg, headers) as client:
            resp = client.request(method, url, content=body)
    except httpx.HTTPError as exc:
        raise TransportError(url, f"{type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise TransportError(url, "Unexpected HTTP response", status_code=resp.status_code)
    return FetchResult(url=url, status_code=resp.status_code, content=resp.content, text=resp.text)


def get_url(url: str, cfg: FetchConfig, headers: dict[str, str] | None = None) -> FetchResult:
    """GET ``url``.

    Raises:
        TransportError: On network failure or a non-2xx status
    """
    return _send("GET", url, cfg, headers)


def post_json(
    url: str,
    payload: Any,
    cfg: FetchConfig,
    headers: dict[str, str] | None = None,
) -> FetchResult:
    """POST ``payload`` as JSON to ``url``.

    Raises:
        TransportError: On network failure or a non-2xx status
    """
    merged = {"Content-Type": "application/json", "Accept": "application/json"}
    merged.update(headers or {})
    body = json.dumps(payload).encode("utf-8")
    return _send("POST", url, cfg, merged, body)


def decode_json(result: FetchResult, strip_prefix_line: bool = False) -> Any:
    """Decode a JSON response body.

    Args:
        result: The response to decode
        strip_prefix_line: Drop the first line before decoding, for APIs
            that guard JSON responses with a junk prefix line

    Raises:
        ParseError: If the body is not valid JSON
    """
    text = result.text
    if strip_prefix_line:
        parts = text.split("\n", 1)
        if len(parts) != 2:
            raise ParseError(f"{result.url}: response is missing its prefix line")
        text = parts[1]
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{result.url}: invalid JSON response: {exc}") from exc
