"""Tests for spinner rendering around background actions."""

from __future__ import annotations

import io
import threading

import pytest
from rich.console import Console

from reset_manager.progress import ProgressReporter, track


@pytest.fixture
def buffer_console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, force_terminal=False, width=120), buf


class TestTrack:
    """Tests for track."""

    def test_returns_action_result_and_renders_checkmark(self, buffer_console) -> None:
        console, buf = buffer_console

        result = track("Applying configuration", lambda: 42, console=console)

        assert result == 42
        assert "✓ Applying configuration" in buf.getvalue()

    def test_runs_action_off_the_calling_thread(self, buffer_console) -> None:
        console, _ = buffer_console
        caller = threading.get_ident()

        worker = track("Deleting namespace", threading.get_ident, console=console)

        assert worker != caller

    def test_exception_passes_through_unchanged(self, buffer_console) -> None:
        console, buf = buffer_console

        def _fail() -> None:
            raise RuntimeError("cluster create failed")

        with pytest.raises(RuntimeError, match="cluster create failed"):
            track("Creating cluster", _fail, console=console)
        assert "✗ Creating cluster" in buf.getvalue()

    def test_ok_predicate_marks_failed_result(self, buffer_console) -> None:
        console, buf = buffer_console

        result = track("Applying configuration", lambda: False, ok=bool, console=console)

        assert result is False
        assert "✗ Applying configuration" in buf.getvalue()

    def test_positional_args_are_forwarded(self, buffer_console) -> None:
        console, _ = buffer_console

        assert track("Adding", lambda a, b: a + b, 2, 3, console=console) == 5


class TestProgressReporter:
    """Tests for ProgressReporter."""

    def test_update_then_success_line(self, buffer_console) -> None:
        console, buf = buffer_console

        with ProgressReporter("Waiting for pods", console=console) as reporter:
            reporter.update("Pods ready: 1/3")

        assert buf.getvalue().strip().endswith("✓ Waiting for pods")

    def test_fail_renders_cross(self, buffer_console) -> None:
        console, buf = buffer_console

        with ProgressReporter("Waiting for PVC", console=console) as reporter:
            reporter.fail()

        assert "✗ Waiting for PVC" in buf.getvalue()
