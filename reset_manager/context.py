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

"""Active kubectl context check run before any mutating step."""

from __future__ import annotations

from collections.abc import Callable

from reset_manager import console
from reset_manager.errors import ContextMismatch
from reset_manager.kube import KubeClient
from reset_manager.models import ResetMode


def ensure_context(
    client: KubeClient,
    expected: str,
    *,
    mode: ResetMode = ResetMode.QUICK,
    allow_switch: bool = False,
    confirm: Callable[[str], bool] | None = None,
) -> str:
    """Verify that kubectl points at the expected cluster.

    A nuke reset recreates the cluster (and with it the context), so a
    mismatch there is only reported. Otherwise the operator may be offered a
    switch when the environment allows it.

    Args:
        client: Cluster client used to read and switch the context.
        expected: Context name the environment requires.
        mode: Reset mode of the current run.
        allow_switch: Whether the operator may be asked to switch contexts.
        confirm: Asks the operator a yes/no question; None means non-interactive.

    Returns:
        The context active after the check.

    Raises:
        ContextMismatch: If the active context is wrong and was not switched.
    """
    current = client.current_context()
    if current == expected:
        console.print(f"[green]✓[/green] Context: {current}")
        return current

    console.print(f"[yellow]⚠️  Current context: {current}[/yellow]")
    if mode is ResetMode.NUKE:
        console.print("[green]✓[/green] Nuke mode will create the cluster, continuing...")
        return current

    if allow_switch and confirm is not None and confirm(f"Switch to {expected} context?"):
        if client.use_context(expected):
            console.print(f"[green]✓[/green] Switched to {expected}")
            return expected

    raise ContextMismatch(current, expected)
