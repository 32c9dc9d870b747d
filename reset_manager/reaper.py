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

"""Namespace teardown: delete, wait for removal, recreate."""

from __future__ import annotations

from rich.panel import Panel

from reset_manager import console, logger
from reset_manager.clock import Clock
from reset_manager.constants import (
    NAMESPACE_DELETE_TIMEOUT_SECONDS,
    NAMESPACE_POLL_INTERVAL_SECONDS,
    OVERLAY_SETTLE_SECONDS,
)
from reset_manager.errors import NamespaceDeletionTimeout, ResetError
from reset_manager.kube import KubeClient
from reset_manager.models import NamespaceState, PollOutcome
from reset_manager.polling import poll
from reset_manager.progress import ProgressReporter, track


def wait_namespace_absent(
    client: KubeClient,
    namespace: str,
    *,
    clock: Clock,
    timeout: float = NAMESPACE_DELETE_TIMEOUT_SECONDS,
    interval: float = NAMESPACE_POLL_INTERVAL_SECONDS,
) -> PollOutcome:
    """Poll until the namespace can no longer be retrieved.

    Args:
        client: Cluster client.
        namespace: Namespace being deleted.
        clock: Clock for the polling loop.
        timeout: Seconds to wait for removal.
        interval: Seconds between checks.

    Returns:
        The poll outcome; ``last_observed`` is the last NamespaceState seen.
    """
    with ProgressReporter("Waiting for namespace deletion...") as reporter:
        outcome = poll(
            lambda: client.namespace_state(namespace),
            lambda state: state is NamespaceState.ABSENT,
            timeout=timeout,
            interval=interval,
            clock=clock,
            on_tick=lambda state, elapsed: reporter.update(
                f"Waiting for namespace deletion ({state.value})... {int(elapsed)}s"
            ),
            label=f"namespace/{namespace}",
        )
        if not outcome.succeeded:
            reporter.fail()
    return outcome


def create_namespace(client: KubeClient, namespace: str) -> None:
    """Create the namespace, treating AlreadyExists as success.

    Raises:
        ResetError: If the namespace could not be created.
    """
    if not client.create_namespace(namespace):
        raise ResetError(f"Failed to create namespace '{namespace}'")
    console.print(f"[green]✓[/green] Namespace '{namespace}' created")


def reap_namespace(
    client: KubeClient,
    namespace: str,
    *,
    clock: Clock,
    timeout: float = NAMESPACE_DELETE_TIMEOUT_SECONDS,
    interval: float = NAMESPACE_POLL_INTERVAL_SECONDS,
) -> PollOutcome:
    """Delete a namespace, wait until it is gone, and create it again.

    Args:
        client: Cluster client.
        namespace: Namespace to recreate.
        clock: Clock for the polling loop.
        timeout: Seconds to wait for removal.
        interval: Seconds between checks.

    Returns:
        Outcome of the removal wait.

    Raises:
        NamespaceDeletionTimeout: If the namespace still exists after *timeout*.
        ResetError: If the delete request or the recreate fails.
    """
    console.print(Panel.fit(f"Reaping namespace {namespace}", style="bold blue"))
    if not track("Deleting namespace", client.delete_namespace, namespace, ok=bool):
        raise ResetError(f"Failed to request deletion of namespace '{namespace}'")

    outcome = wait_namespace_absent(client, namespace, clock=clock, timeout=timeout, interval=interval)
    if not outcome.succeeded:
        raise NamespaceDeletionTimeout(namespace, timeout)
    logger.info("Namespace %s removed after %.1fs", namespace, outcome.elapsed)

    create_namespace(client, namespace)
    return outcome


def purge_overlay(
    client: KubeClient,
    overlay: str,
    namespace: str,
    *,
    clock: Clock,
    settle: float = OVERLAY_SETTLE_SECONDS,
) -> bool:
    """Delete the overlay's resources inside the namespace, keeping the namespace.

    Used where the operator may not delete namespaces. A failed delete is
    reported and the reset continues; the following apply is idempotent.

    Args:
        client: Cluster client.
        overlay: Kustomize overlay whose resources are deleted.
        namespace: Namespace holding the resources.
        clock: Clock for the settle wait.
        settle: Seconds to let resources terminate.

    Returns:
        Whether the delete succeeded.
    """
    console.print(Panel.fit(f"Deleting resources in namespace {namespace}", style="bold blue"))
    deleted = track("Deleting resources", client.delete_overlay, overlay, namespace, ok=bool)
    if not deleted:
        console.print("[yellow]⚠️  Resource deletion reported errors, continuing...[/yellow]")
    with ProgressReporter("Waiting for termination"):
        clock.sleep(settle)
    return deleted
