# /*
# Copyright 2026 The reset-manager Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Spinner rendering for background actions and polling loops."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeVar

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from reset_manager import console as default_console
from reset_manager.constants import SPINNER_NAME, SPINNER_REFRESH_PER_SECOND

T = TypeVar("T")


@dataclass
class ProgressHandle:
    """One in-flight background action and its label."""

    label: str
    future: Future

    def result(self) -> Any:
        return self.future.result()


class ProgressReporter:
    """Renders a spinner line until the owning step finishes.

    The spinner animates on rich's refresh thread every 100ms, independent
    of whatever the caller is blocked on. Exiting the context tears the
    spinner down and prints a final ``✓`` (or ``✗`` on error) line.

    Args:
        label: Text shown next to the spinner and on the final line.
        console: Console to render on.
    """

    def __init__(self, label: str, console: Console | None = None) -> None:
        self.label = label
        self._console = console or default_console
        self._progress = Progress(
            SpinnerColumn(SPINNER_NAME, style="blue"),
            TextColumn("{task.description}"),
            console=self._console,
            transient=True,
            refresh_per_second=SPINNER_REFRESH_PER_SECOND,
        )
        self._task = None
        self.succeeded = True

    def __enter__(self) -> ProgressReporter:
        self._progress.start()
        self._task = self._progress.add_task(self.label, total=None)
        return self

    def update(self, description: str) -> None:
        """Replace the text next to the spinner (e.g. running counts)."""
        self._progress.update(self._task, description=description)

    def fail(self) -> None:
        """Mark the step as failed so the final line renders ``✗``."""
        self.succeeded = False

    def __exit__(self, exc_type, exc, tb) -> None:
        self._progress.stop()
        if exc_type is None and self.succeeded:
            self._console.print(f"[green]✓[/green] {self.label}")
        else:
            self._console.print(f"[red]✗[/red] {self.label}")


def start_background(executor: ThreadPoolExecutor, label: str, fn: Callable[..., T], *args: Any) -> ProgressHandle:
    """Submit *fn* to *executor* and wrap the future in a handle."""
    return ProgressHandle(label=label, future=executor.submit(fn, *args))


def track(
    label: str,
    fn: Callable[..., T],
    *args: Any,
    ok: Callable[[T], bool] | None = None,
    console: Console | None = None,
) -> T:
    """Run *fn* in the background while a spinner reports on it.

    The caller blocks on the action's result, not on the spinner. The
    action's return value or exception passes through unchanged.

    Args:
        label: Text shown next to the spinner.
        fn: Action to run.
        *args: Positional arguments for *fn*.
        ok: Decides from the result whether the final line renders as a success.
        console: Console to render on.

    Returns:
        Whatever *fn* returns.
    """
    with ThreadPoolExecutor(max_workers=1) as executor:
        handle = start_background(executor, label, fn, *args)
        with ProgressReporter(label, console=console) as reporter:
            result = handle.result()
            if ok is not None and not ok(result):
                reporter.fail()
            return result
