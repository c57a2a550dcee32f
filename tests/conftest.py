from pathlib import Path

import pytest

from feedwright.config import AppConfig
from feedwright.fetch import FetchResult


def make_result(url: str, body: str | bytes, status_code: int = 200) -> FetchResult:
    content = body.encode("utf-8") if isinstance(body, str) else body
    return FetchResult(url=url, status_code=status_code, content=content, text=content.decode("utf-8"))


@pytest.fixture
def cfg(tmp_path: Path) -> AppConfig:
    """Config pointing every directory into tmp_path, with console logging off."""
    config = AppConfig()
    config.state.workdir = str(tmp_path / "workdir")
    config.output.directory = str(tmp_path / "out")
    config.sources.config_dir = str(tmp_path / "configs")
    config.logging.console = False
    return config
