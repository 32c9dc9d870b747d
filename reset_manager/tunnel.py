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

"""Local port-forward to the in-cluster proxy service (dev only)."""

from __future__ import annotations

import os
import signal

import sh
from rich.panel import Panel

from reset_manager import console, logger
from reset_manager.clock import Clock
from reset_manager.constants import PORT_RELEASE_WAIT_SECONDS
from reset_manager.progress import ProgressReporter


def listening_pids(port: int) -> list[int]:
    """PIDs of processes holding *port*, according to ``lsof``.

    Returns:
        PIDs, empty if nothing listens or lsof is unavailable.
    """
    try:
        output = sh.lsof("-ti", f":{port}")
    except sh.ErrorReturnCode:
        return []
    except sh.CommandNotFound:
        logger.warning("lsof not available; cannot check for an existing tunnel on port %d", port)
        return []
    return [int(pid) for pid in str(output).split() if pid.isdigit()]


def release_port(port: int, *, clock: Clock) -> int:
    """Kill any process occupying the local port. Best-effort.

    Args:
        port: Local port to free.
        clock: Clock for the short wait after killing.

    Returns:
        Number of processes signalled.
    """
    killed = 0
    with ProgressReporter("Cleaning up port-forwards"):
        for pid in listening_pids(port):
            try:
                os.kill(pid, signal.SIGKILL)
                killed += 1
            except ProcessLookupError:
                continue
            except PermissionError:
                logger.warning("Not allowed to stop process %d on port %d", pid, port)
        clock.sleep(PORT_RELEASE_WAIT_SECONDS)
    return killed


class PortForwardSession:
    """Foreground ``kubectl port-forward`` that runs until Ctrl+C.

    Args:
        namespace: Namespace of the service.
        service: Service name to tunnel to.
        local_port: Port on localhost.
        remote_port: Service port.
    """

    def __init__(self, namespace: str, service: str, local_port: int, remote_port: int) -> None:
        self.namespace = namespace
        self.service = service
        self.local_port = local_port
        self.remote_port = remote_port

    def args(self) -> list[str]:
        return [
            "port-forward", "-n", self.namespace,
            f"svc/{self.service}", f"{self.local_port}:{self.remote_port}",
        ]

    def run(self, *, clock: Clock, url: str = "") -> None:
        """Free the local port, then block on the tunnel until interrupted.

        An interrupt ends only the session.

        Raises:
            RuntimeError: If kubectl exits with an error.
        """
        release_port(self.local_port, clock=clock)
        console.print(Panel.fit(f"Port-forward localhost:{self.local_port} -> svc/{self.service}", style="bold blue"))
        if url:
            console.print(f"[green]\U0001f680 Specify 7 will be available at:[/green] {url}")
        console.print("Press Ctrl+C to stop the port-forward and exit")
        try:
            sh.kubectl(*self.args(), _fg=True)
        except KeyboardInterrupt:
            console.print("\n[yellow]Port-forward stopped[/yellow]")
        except sh.ErrorReturnCode as err:
            if err.exit_code in (-signal.SIGINT, 128 + signal.SIGINT):
                console.print("\n[yellow]Port-forward stopped[/yellow]")
                return
            raise RuntimeError(f"kubectl port-forward exited with status {err.exit_code}") from err
