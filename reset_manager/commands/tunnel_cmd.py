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

"""Port-forward command."""

from __future__ import annotations

import typer

from reset_manager.clock import Clock
from reset_manager.config import load_config
from reset_manager.models import Environment
from reset_manager.tunnel import PortForwardSession


def port_forward(
    namespace: str | None = typer.Option(None, "--namespace", help="Namespace of the service"),
    service: str | None = typer.Option(None, "--service", help="Service to tunnel to"),
    local_port: int | None = typer.Option(None, "--local-port", help="Port on localhost"),
    remote_port: int | None = typer.Option(None, "--remote-port", help="Service port"),
) -> None:
    """Open a port-forward to the in-cluster proxy until Ctrl+C."""
    cfg = load_config(
        Environment.DEV,
        namespace=namespace, service=service, local_port=local_port, remote_port=remote_port,
    )
    session = PortForwardSession(cfg.namespace, cfg.service, cfg.local_port, cfg.remote_port)
    session.run(clock=Clock(), url=cfg.public_url)
