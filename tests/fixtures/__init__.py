"""Test fixtures for RSML."""

from tests.fixtures.markup_samples import (
    BROKEN_MARKUP,
    BUTTON_CODE,
    BUTTON_MARKUP,
    COUNTER_CODE,
    COUNTER_MARKUP,
    FOCUS_CODE,
    FOCUS_MARKUP,
    render_markup,
)

__all__ = [
    "BROKEN_MARKUP",
    "BUTTON_CODE",
    "BUTTON_MARKUP",
    "COUNTER_CODE",
    "COUNTER_MARKUP",
    "FOCUS_CODE",
    "FOCUS_MARKUP",
    "render_markup",
]
