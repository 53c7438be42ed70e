"""Test harness for blame-split.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, FakeGitBackend, ...
"""

from tests.harness.app_runner import run_app, scenario_backend
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    resize_and_settle,
)
from tests.harness.content import (
    strips_to_text,
    gutter_rows,
    cursor_lines,
)
from tests.harness.builders import (
    SHA_A,
    SHA_B,
    SHA_C,
    UNCOMMITTED,
    DEFAULT_TIME,
    FakeGitBackend,
    make_porcelain,
    scenario_entries,
    ok,
    failed,
)
from tests.harness.fakes import (
    FakeView,
    FakeGutter,
    FakeContent,
    FakeScheduler,
)

__all__ = [
    "run_app",
    "scenario_backend",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "strips_to_text",
    "gutter_rows",
    "cursor_lines",
    "SHA_A",
    "SHA_B",
    "SHA_C",
    "UNCOMMITTED",
    "DEFAULT_TIME",
    "FakeGitBackend",
    "make_porcelain",
    "scenario_entries",
    "ok",
    "failed",
    "FakeView",
    "FakeGutter",
    "FakeContent",
    "FakeScheduler",
]
