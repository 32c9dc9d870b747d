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

"""Reset orchestration: compose the reset steps into one sequential run."""

from __future__ import annotations

from collections.abc import Callable

from rich.panel import Panel

from reset_manager import console, logger
from reset_manager.clock import Clock
from reset_manager.config import ResetConfig, validate_options
from reset_manager.context import ensure_context
from reset_manager.errors import ContextMismatch
from reset_manager.health import confirm_ready
from reset_manager.kube import KubeClient
from reset_manager.models import ReapStrategy, ResetMode, ResetReport
from reset_manager.progress import track
from reset_manager.provisioner import ClusterProvisioner
from reset_manager.readiness import wait_ready
from reset_manager.reaper import create_namespace, purge_overlay, reap_namespace
from reset_manager.tunnel import PortForwardSession
from reset_manager.utils import require_command
from reset_manager.volumes import wait_bound


class ResetOrchestrator:
    """Runs one reset of the configured environment.

    Steps run strictly one after another: tool check, context check, reap
    (or cluster rebuild), apply, claim bind, pod readiness, backend probe,
    then the status report and, for dev, the port-forward. Fatal errors propagate;
    everything after the apply is best-effort and recorded as a warning.

    Args:
        cfg: Resolved reset configuration.
        client: Cluster client, defaults to kubectl.
        provisioner: k3d provisioner used in nuke mode.
        clock: Clock shared by all waits.
        confirm: Yes/no prompt for interactive context switching, or None.
    """

    def __init__(
        self,
        cfg: ResetConfig,
        *,
        client: KubeClient | None = None,
        provisioner: ClusterProvisioner | None = None,
        clock: Clock | None = None,
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self.cfg = cfg
        self.client = client or KubeClient()
        self.provisioner = provisioner or ClusterProvisioner(max_retries=cfg.cluster_create_max_retries)
        self.clock = clock or Clock()
        self.confirm = confirm

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def check_prerequisites(self, mode: ResetMode) -> None:
        prereqs = ["kubectl"]
        if mode is ResetMode.NUKE:
            prereqs.extend(["k3d", "docker"])
        if self.cfg.port_forward:
            prereqs.append("lsof")
        console.print(Panel.fit("Checking prerequisites", style="bold blue"))
        for cmd in prereqs:
            require_command(cmd)
        console.print("[green]✅ All required tools are available[/green]")

    def check_context(self, mode: ResetMode) -> None:
        console.print(Panel.fit("Checking kubectl context", style="bold blue"))
        ensure_context(
            self.client,
            self.cfg.expected_context,
            mode=mode,
            allow_switch=self.cfg.allow_context_switch,
            confirm=self.confirm,
        )

    def reap(self, mode: ResetMode, report: ResetReport) -> None:
        cfg = self.cfg
        if mode is ResetMode.NUKE:
            self.provisioner.rebuild(cfg.cluster_name, cfg.seed_dataset)
            current = self.client.current_context()
            if current != cfg.expected_context:
                raise ContextMismatch(current, cfg.expected_context)
            create_namespace(self.client, cfg.namespace)
        elif cfg.reap_strategy is ReapStrategy.OVERLAY:
            purge_overlay(self.client, cfg.overlay, cfg.namespace, clock=self.clock, settle=cfg.overlay_settle)
        else:
            report.reap = reap_namespace(
                self.client,
                cfg.namespace,
                clock=self.clock,
                timeout=cfg.namespace_timeout,
                interval=cfg.namespace_interval,
            )

    def apply(self, report: ResetReport) -> None:
        console.print(Panel.fit(f"Applying overlay {self.cfg.overlay}", style="bold blue"))
        report.applied = track("Applying configuration", self.client.apply_overlay, self.cfg.overlay, ok=bool)
        if not report.applied:
            self._warn(report, "Overlay apply reported errors; waiting for the namespace to converge anyway")

    def wait_claim(self, report: ResetReport) -> None:
        cfg = self.cfg
        if not cfg.claim_name:
            return
        console.print(Panel.fit(f"Waiting for PVC {cfg.claim_name} to be bound", style="bold blue"))
        report.claim = wait_bound(
            self.client,
            cfg.claim_name,
            cfg.namespace,
            clock=self.clock,
            timeout=cfg.pvc_timeout,
            interval=cfg.pvc_interval,
        )
        if not report.claim.succeeded:
            self._warn(report, f"PVC {cfg.claim_name} not bound yet, but continuing...")
            console.print(self.client.claims_table(cfg.namespace))

    def wait_pods(self, report: ResetReport) -> None:
        console.print(Panel.fit("Waiting for pods to be ready", style="bold blue"))
        report.readiness = wait_ready(
            self.client,
            self.cfg.namespace,
            clock=self.clock,
            timeout=self.cfg.pod_ready_timeout,
            interval=self.cfg.pod_ready_interval,
        )
        if report.readiness.succeeded:
            console.print(f"[green]✅ All pods are ready ({report.readiness.last_observed})[/green]")
        else:
            self._warn(report, "Timeout reached. Some pods may still be starting.")
            console.print(self.client.pods_table(self.cfg.namespace))

    def probe_backend(self, report: ResetReport) -> None:
        cfg = self.cfg
        console.print(Panel.fit("Waiting for Specify backend to be fully initialised", style="bold blue"))
        report.backend = confirm_ready(
            self.client,
            cfg.namespace,
            cfg.deployment,
            cfg.ready_marker,
            clock=self.clock,
            initial_delay=cfg.probe_initial_delay,
            max_attempts=cfg.probe_max_attempts,
            attempt_interval=cfg.probe_interval,
            tail_lines=cfg.probe_tail_lines,
        )
        if report.backend.succeeded:
            console.print("[green]✅ Specify backend is ready![/green]")
        else:
            self._warn(report, "Could not confirm Specify backend is ready, but continuing...")

    def report_status(self, report: ResetReport) -> None:
        console.print(Panel.fit("Deployment status", style="bold blue"))
        console.print(self.client.pods_table(self.cfg.namespace))
        if report.degraded:
            console.print(f"[yellow]⚠️  Reset complete with {len(report.warnings)} warning(s)[/yellow]")
        else:
            console.print("[green]✅ Reset complete![/green]")
        if self.cfg.public_url and not self.cfg.port_forward:
            console.print(f"[green]\U0001f680 Specify 7 is available at:[/green] {self.cfg.public_url}")

    def open_tunnel(self) -> None:
        cfg = self.cfg
        session = PortForwardSession(cfg.namespace, cfg.service, cfg.local_port, cfg.remote_port)
        session.run(clock=self.clock, url=cfg.public_url)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def run(self, mode: ResetMode = ResetMode.QUICK) -> ResetReport:
        """Run the full reset.

        Args:
            mode: Quick (namespace only) or nuke (rebuild the cluster).

        Returns:
            Per-step outcomes of the run.

        Raises:
            ResetError: On a fatal failure (wrong context, namespace deletion
                timeout, cluster creation failure, missing seed dataset).
            RuntimeError: If a required command-line tool is not installed.
        """
        validate_options(self.cfg, mode)
        report = ResetReport(mode=mode)
        logger.info("Starting %s reset of %s", mode.value, self.cfg.namespace)

        self.check_prerequisites(mode)
        self.check_context(mode)
        self.reap(mode, report)
        self.apply(report)
        self.wait_claim(report)
        self.wait_pods(report)
        self.probe_backend(report)
        self.report_status(report)

        if self.cfg.port_forward:
            self.open_tunnel()
        return report

    def _warn(self, report: ResetReport, message: str) -> None:
        report.warnings.append(message)
        console.print(f"[yellow]⚠️  {message}[/yellow]")
        logger.debug("Warning recorded: %s", message)
