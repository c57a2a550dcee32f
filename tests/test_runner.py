from pathlib import Path

from feedwright.core.errors import TransportError
from feedwright.runner import run_sources, summary_table
from feedwright.sources import apple_security, rss

from conftest import make_result

GOOD_RSS = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Good</title><link>https://good.example</link>
<item><title>Hello</title><link>https://good.example/1</link></item>
</channel></rss>
"""


def _fake_get_url(url, cfg, headers=None):
    if "bad" in url:
        raise TransportError(url, "Unexpected HTTP response", status_code=500)
    return make_result(url, GOOD_RSS)


def test_failing_source_does_not_stop_others(monkeypatch, cfg):
    cfg.sources.rss = {"bad": "https://bad.example/rss", "good": "https://good.example/rss"}
    monkeypatch.setattr(rss, "get_url", _fake_get_url)

    results = run_sources(["bad", "good", "unknown"], cfg)

    assert [(r.name, r.ok) for r in results] == [("bad", False), ("good", True), ("unknown", False)]
    assert "500" in results[0].error
    assert results[1].items == 1
    out = Path(cfg.output.directory)
    assert results[1].path == out / "good.xml"
    assert (out / "good.xml").exists()
    assert not (out / "bad.xml").exists()
    assert summary_table(results).row_count == 3


def test_output_format_is_respected(monkeypatch, cfg):
    cfg.sources.rss = {"good": "https://good.example/rss"}
    cfg.output.format = "atom"
    monkeypatch.setattr(rss, "get_url", _fake_get_url)

    [result] = run_sources(["good"], cfg)

    assert result.path.name == "good.atom"
    assert "http://www.w3.org/2005/Atom" in result.path.read_text(encoding="utf-8")


def test_file_logging_writes_events(monkeypatch, cfg):
    cfg.sources.rss = {"good": "https://good.example/rss"}
    cfg.logging.file = True
    monkeypatch.setattr(rss, "get_url", _fake_get_url)

    run_sources(["good"], cfg)

    log_text = (Path(cfg.output.directory) / cfg.logging.filename).read_text(encoding="utf-8")
    assert '"event": "run_start"' in log_text
    assert '"event": "source_done"' in log_text


def test_unwritable_output_fails_only_that_source(monkeypatch, cfg):
    cfg.sources.rss = {"first": "https://first.example/rss", "good": "https://good.example/rss"}
    monkeypatch.setattr(rss, "get_url", _fake_get_url)
    out = Path(cfg.output.directory)
    (out / "first.xml").mkdir(parents=True)

    results = run_sources(["first", "good"], cfg)

    assert [(r.name, r.ok) for r in results] == [("first", False), ("good", True)]
    assert "Unable to write feed" in results[0].error
    assert (out / "good.xml").is_file()


def test_malformed_upstream_payload_fails_only_that_source(monkeypatch, cfg):
    cfg.sources.rss = {"good": "https://good.example/rss"}
    page = '<script type="application/json">{"props": {"pageProps": {"blogs": ["oops"]}}}</script>'
    monkeypatch.setattr(apple_security, "get_url", lambda url, fetch_cfg, headers=None: make_result(url, page))
    monkeypatch.setattr(rss, "get_url", _fake_get_url)

    results = run_sources(["apple_security", "good"], cfg)

    assert [(r.name, r.ok) for r in results] == [("apple_security", False), ("good", True)]
    assert "Unexpected blog entry" in results[0].error


def test_unexpected_exception_is_contained(monkeypatch, cfg):
    cfg.sources.rss = {"boom": "https://boom.example/rss", "good": "https://good.example/rss"}

    def flaky_get_url(url, fetch_cfg, headers=None):
        if "boom" in url:
            raise RuntimeError("upstream exploded")
        return make_result(url, GOOD_RSS)

    monkeypatch.setattr(rss, "get_url", flaky_get_url)

    results = run_sources(["boom", "good"], cfg)

    assert [(r.name, r.ok) for r in results] == [("boom", False), ("good", True)]
    assert results[0].error == "RuntimeError: upstream exploded"
