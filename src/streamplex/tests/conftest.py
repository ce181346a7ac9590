"""Shared fixtures: isolate settings and logging state per test."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from streamplex.foundation.config import clear_settings_cache
from streamplex.runtime.observability import CaptureRenderer, NoOpRenderer
from streamplex.runtime.observability.logging import set_renderer


@pytest.fixture(autouse=True)
def isolated_state() -> Iterator[None]:
    """Fresh settings and silent logging for every test."""
    clear_settings_cache()
    set_renderer(NoOpRenderer(), level="INFO")
    yield
    clear_settings_cache()
    set_renderer(NoOpRenderer(), level="INFO")


@pytest.fixture
def capture() -> CaptureRenderer:
    """Record every log entry, debug included."""
    renderer = CaptureRenderer()
    set_renderer(renderer, level="DEBUG")
    return renderer
