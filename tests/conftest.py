"""Shared test fixtures for apicatalog.

Provides the raw and parsed fixture descriptions, a call-counting loader
double for session tests, and isolation of configuration and global output
state. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from apicatalog.classifier import SubsectionClassifier
from apicatalog.models import ApiDescription
from apicatalog.output import reset_output
from apicatalog.parser import parse_description

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the global OutputManager and the CLI's log handler after each test.

    Both hold references to the streams CliRunner swapped in, which are
    closed once the invocation finishes.
    """
    yield
    reset_output()
    logging.getLogger("apicatalog").handlers = []
    logging.getLogger("apicatalog").setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Description fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mini_path() -> Path:
    return FIXTURES_DIR / "ordercloud_mini.json"


@pytest.fixture
def mini_raw(mini_path: Path) -> dict[str, Any]:
    """Raw OrderCloud-style description with ``$ref`` pointers intact."""
    return json.loads(mini_path.read_text(encoding="utf-8"))


@pytest.fixture
def mini_description(mini_raw: dict[str, Any]) -> ApiDescription:
    return parse_description(mini_raw)


@pytest.fixture
def classifier() -> SubsectionClassifier:
    """The built-in ``Me`` ruleset."""
    return SubsectionClassifier()


# ---------------------------------------------------------------------------
# Loader double
# ---------------------------------------------------------------------------


class CountingLoader:
    """Loader double that counts calls and can suspend before returning.

    Args:
        description: Returned on every call (a deep copy each time).
        delay: Seconds to sleep before returning, to widen race windows.
        error: Raised instead of returning when set.
    """

    def __init__(
        self,
        description: ApiDescription | None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.description = description
        self.delay = delay
        self.error = error
        self.calls = 0

    async def __call__(self) -> ApiDescription:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        assert self.description is not None
        return copy.deepcopy(self.description)


@pytest.fixture
def counting_loader(mini_description: ApiDescription) -> CountingLoader:
    return CountingLoader(mini_description)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config at *tmp_path*, clear ``APICATALOG_*`` and chdir there."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr("apicatalog.config._is_xdg_platform", lambda: True)
    for var in [
        "APICATALOG_SPEC",
        "APICATALOG_RULESET",
        "APICATALOG_UMBRELLA",
        "APICATALOG_STRICT",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
