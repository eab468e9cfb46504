import json
from pathlib import Path

import pytest

from rss_canon import FeedParser

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixture_text():
    def _read(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")
    return _read


@pytest.fixture
def golden():
    def _load(name: str):
        return json.loads((FIXTURES / f"{name}.json").read_text(encoding="utf-8"))
    return _load


@pytest.fixture
def parser():
    return FeedParser()
