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

"""Wait subcommands (namespace-deleted, pvc, pods, backend)."""

from __future__ import annotations

import typer

from reset_manager import console
from reset_manager.clock import Clock
from reset_manager.config import ResetConfig, load_config
from reset_manager.health import confirm_ready
from reset_manager.kube import KubeClient
from reset_manager.models import Environment, PollOutcome
from reset_manager.readiness import wait_ready
from reset_manager.reaper import wait_namespace_absent
from reset_manager.volumes import wait_bound

app = typer.Typer(help="Run a single readiness wait.")

ENV_OPTION = typer.Option(Environment.DEV, "--env", "-e", help="Target environment profile")


def _config(env: Environment, namespace: str | None) -> ResetConfig:
    return load_config(env, namespace=namespace)


def _report(outcome: PollOutcome, what: str) -> None:
    if outcome.succeeded:
        console.print(f"[green]✅ {what} after {outcome.elapsed:.0f}s[/green]")
    else:
        console.print(f"[yellow]⚠️  {what} not reached after {outcome.elapsed:.0f}s "
                      f"(last observed: {outcome.last_observed})[/yellow]")


@app.command("namespace-deleted")
def namespace_deleted(
    env: Environment = ENV_OPTION,
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace to watch"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to wait"),
) -> None:
    """Wait until a namespace has been fully removed."""
    cfg = _config(env, namespace)
    outcome = wait_namespace_absent(
        KubeClient(), cfg.namespace, clock=Clock(),
        timeout=timeout or cfg.namespace_timeout, interval=cfg.namespace_interval,
    )
    _report(outcome, f"Namespace {cfg.namespace} deleted")
    if not outcome.succeeded:
        raise typer.Exit(code=1)


@app.command()
def pvc(
    env: Environment = ENV_OPTION,
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace of the claim"),
    claim: str | None = typer.Option(None, "--claim", help="PersistentVolumeClaim name"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to wait"),
) -> None:
    """Wait for a PersistentVolumeClaim to be bound."""
    cfg = _config(env, namespace)
    client = KubeClient()
    claim_name = claim or cfg.claim_name
    outcome = wait_bound(
        client, claim_name, cfg.namespace, clock=Clock(),
        timeout=timeout or cfg.pvc_timeout, interval=cfg.pvc_interval,
    )
    _report(outcome, f"PVC {claim_name} bound")
    if not outcome.succeeded:
        console.print(client.claims_table(cfg.namespace))


@app.command()
def pods(
    env: Environment = ENV_OPTION,
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace to watch"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to wait"),
) -> None:
    """Wait for every non-completed pod to be ready."""
    cfg = _config(env, namespace)
    client = KubeClient()
    outcome = wait_ready(
        client, cfg.namespace, clock=Clock(),
        timeout=timeout or cfg.pod_ready_timeout, interval=cfg.pod_ready_interval,
    )
    _report(outcome, "All pods ready")
    console.print(client.pods_table(cfg.namespace))


@app.command()
def backend(
    env: Environment = ENV_OPTION,
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace of the deployment"),
    initial_delay: float | None = typer.Option(None, "--initial-delay", help="Seconds before the first probe"),
) -> None:
    """Look for the backend's readiness marker in its logs."""
    cfg = _config(env, namespace)
    outcome = confirm_ready(
        KubeClient(), cfg.namespace, cfg.deployment, cfg.ready_marker, clock=Clock(),
        initial_delay=cfg.probe_initial_delay if initial_delay is None else initial_delay,
        max_attempts=cfg.probe_max_attempts, attempt_interval=cfg.probe_interval,
        tail_lines=cfg.probe_tail_lines,
    )
    _report(outcome, f"Marker '{cfg.ready_marker}' seen")
