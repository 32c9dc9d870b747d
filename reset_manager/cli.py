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

"""
cli.py - Reset and readiness CLI for Specify on Kubernetes.

Commands:
    reset         Full reset: reap namespace (or rebuild cluster), apply, wait
    cluster       Individual k3d steps (create, delete, seed)
    wait          Individual readiness waits (namespace-deleted, pvc, pods, backend)
    port-forward  Open the local tunnel to the in-cluster proxy

Examples:
    # Quick dev reset (namespace only)
    reset-manager reset

    # Rebuild the local k3d cluster, reseed and redeploy
    reset-manager reset --nuke

    # Reset UAT without touching the namespace object
    reset-manager reset --env uat

    # Wait for pods only
    reset-manager wait pods --env uat

Environment Variables:
    Any configuration field can be overridden via RESET_* variables, e.g.
    RESET_NAMESPACE, RESET_OVERLAY, RESET_POD_READY_TIMEOUT.
"""

from __future__ import annotations

import logging
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import typer

from reset_manager import console, logger
from reset_manager.clock import Clock
from reset_manager.commands import cluster_cmd, tunnel_cmd, wait_cmd
from reset_manager.config import display_config, load_config
from reset_manager.models import Environment, ResetMode
from reset_manager.orchestrator import ResetOrchestrator

app = typer.Typer(
    help="Reset and readiness orchestration for Specify on Kubernetes.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@contextmanager
def _cancel_on_sigterm(clock: Clock) -> Iterator[Clock]:
    """Cancel the clock's current wait when SIGTERM arrives; restores the old handler on exit."""

    def _handler(signum, frame) -> None:
        logger.info("Received signal %d, cancelling the current wait", signum)
        clock.cancel()

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield clock
    finally:
        signal.signal(signal.SIGTERM, previous)


@app.command()
def reset(
    env: Environment = typer.Option(Environment.DEV, "--env", "-e", help="Target environment profile"),
    nuke: bool = typer.Option(False, "--nuke", help="Delete and recreate the whole k3d cluster (dev only)"),
    no_port_forward: bool = typer.Option(
        False, "--no-port-forward", help="Skip the local port-forward at the end (dev)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer yes to the context switch prompt"),
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace (overrides RESET_NAMESPACE)"),
    overlay: str | None = typer.Option(None, "--overlay", help="Kustomize overlay directory"),
) -> None:
    """Reset the deployment and wait for it to come back.

    Quick mode deletes and recreates the namespace; --nuke rebuilds the
    local cluster and reseeds it first. Non-fatal timeouts are reported as
    warnings and the command still exits 0.
    """
    mode = ResetMode.NUKE if nuke else ResetMode.QUICK
    try:
        overrides = {"namespace": namespace, "overlay": overlay}
        if no_port_forward:
            overrides["port_forward"] = False
        cfg = load_config(env, **overrides)
        display_config(cfg, mode)

        confirm = (lambda _question: True) if yes else (lambda question: typer.confirm(question, default=False))
        with _cancel_on_sigterm(Clock()) as clock:
            ResetOrchestrator(cfg, clock=clock, confirm=confirm).run(mode)
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


app.add_typer(cluster_cmd.app, name="cluster")
app.add_typer(wait_cmd.app, name="wait")
app.command("port-forward")(tunnel_cmd.port_forward)


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
