"""Pytest configuration and shared fixtures for RSML tests."""

from pathlib import Path

import pytest

from rsml.engine.rsml_compiler import CompilerOptions
from rsml.engine.rsml_parser import RsmlParser
from rsml.utils.logger import configure_logging

from tests.fixtures import BUTTON_MARKUP, COUNTER_MARKUP, FOCUS_MARKUP


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default warning-level stderr logging after each test."""
    yield
    configure_logging(level="warning", colors=False)


@pytest.fixture
def parse():
    """Parse markup with a fresh parser."""
    def _parse(source: str, **kwargs):
        return RsmlParser(**kwargs).parse(source)
    return _parse


@pytest.fixture
def default_options() -> CompilerOptions:
    return CompilerOptions()


@pytest.fixture
def markup_dir(tmp_path: Path) -> Path:
    """Directory holding valid markup files, one of them nested."""
    root = tmp_path / "rsml_tests"
    (root / "nested").mkdir(parents=True)
    (root / "counter.rsml").write_text(COUNTER_MARKUP)
    (root / "focus.rsml").write_text(FOCUS_MARKUP)
    (root / "nested" / "button.rsml").write_text(BUTTON_MARKUP)
    return root
