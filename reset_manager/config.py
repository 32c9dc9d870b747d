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

"""Configuration model, profile resolution, and option validation."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from reset_manager import console
from reset_manager.constants import (
    BACKEND_LOG_TAIL_LINES,
    BACKEND_PROBE_INTERVAL_SECONDS,
    BACKEND_PROBE_MAX_ATTEMPTS,
    DEFAULT_CLAIM_NAME,
    DEFAULT_CLUSTER_CREATE_MAX_RETRIES,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_DEPLOYMENT,
    DEFAULT_LOCAL_PORT,
    DEFAULT_NAMESPACE,
    DEFAULT_READY_MARKER,
    DEFAULT_REMOTE_PORT,
    DEFAULT_SERVICE,
    K3D_CONTEXT_PREFIX,
    NAMESPACE_DELETE_TIMEOUT_SECONDS,
    NAMESPACE_POLL_INTERVAL_SECONDS,
    OVERLAY_SETTLE_SECONDS,
    POD_POLL_INTERVAL_SECONDS,
    POD_READY_TIMEOUT_SECONDS,
    PVC_BIND_TIMEOUT_SECONDS,
    PVC_POLL_INTERVAL_SECONDS,
    profile_value,
)
from reset_manager.errors import ConfigurationError
from reset_manager.models import Environment, ReapStrategy, ResetMode


class ResetConfig(BaseSettings):
    """Everything one reset run needs, auto-loaded from RESET_* env vars.

    Values come from the environment profile in ``environments.yaml``;
    RESET_* environment variables take precedence over the profile, and CLI
    flags are applied last with ``model_copy``.

    Attributes:
        environment: Profile this configuration was resolved from.
        namespace: Kubernetes namespace the reset owns.
        cluster_name: k3d cluster name (dev only).
        expected_context: kubectl context the reset must run against.
        overlay: Kustomize overlay directory applied after the reap.
        reap_strategy: Whether to delete the namespace or only the overlay resources.
        allow_nuke: Whether this environment may rebuild its cluster.
        allow_context_switch: Whether the operator may be offered a context switch.
        claim_name: PersistentVolumeClaim to wait on, or empty to skip.
        deployment: Deployment whose logs carry the readiness marker.
        ready_marker: Log line that confirms the backend finished booting.
        probe_initial_delay: Seconds to wait before the first log probe.
        seed_dataset: SQL dump copied into a freshly created cluster.
        port_forward: Whether to open a local tunnel at the end of the run.
        service: Service targeted by the tunnel.
        local_port: Local tunnel port.
        remote_port: Service port targeted by the tunnel.
        public_url: URL printed in the final report.
    """

    model_config = SettingsConfigDict(env_prefix="RESET_", extra="ignore")

    environment: Environment = Environment.DEV
    namespace: str = DEFAULT_NAMESPACE
    cluster_name: str = DEFAULT_CLUSTER_NAME
    expected_context: str = f"{K3D_CONTEXT_PREFIX}{DEFAULT_CLUSTER_NAME}"
    overlay: str = "kustomize/overlays/dev"
    reap_strategy: ReapStrategy = ReapStrategy.NAMESPACE
    allow_nuke: bool = False
    allow_context_switch: bool = False
    claim_name: str = DEFAULT_CLAIM_NAME
    deployment: str = DEFAULT_DEPLOYMENT
    ready_marker: str = DEFAULT_READY_MARKER
    probe_initial_delay: float = Field(default=20, ge=0)
    seed_dataset: str = ""
    port_forward: bool = False
    service: str = DEFAULT_SERVICE
    local_port: int = Field(default=DEFAULT_LOCAL_PORT, ge=1, le=65535)
    remote_port: int = Field(default=DEFAULT_REMOTE_PORT, ge=1, le=65535)
    public_url: str = ""

    namespace_timeout: float = Field(default=NAMESPACE_DELETE_TIMEOUT_SECONDS, gt=0)
    namespace_interval: float = Field(default=NAMESPACE_POLL_INTERVAL_SECONDS, gt=0)
    overlay_settle: float = Field(default=OVERLAY_SETTLE_SECONDS, ge=0)
    pvc_timeout: float = Field(default=PVC_BIND_TIMEOUT_SECONDS, gt=0)
    pvc_interval: float = Field(default=PVC_POLL_INTERVAL_SECONDS, gt=0)
    pod_ready_timeout: float = Field(default=POD_READY_TIMEOUT_SECONDS, gt=0)
    pod_ready_interval: float = Field(default=POD_POLL_INTERVAL_SECONDS, gt=0)
    probe_max_attempts: int = Field(default=BACKEND_PROBE_MAX_ATTEMPTS, ge=1)
    probe_interval: float = Field(default=BACKEND_PROBE_INTERVAL_SECONDS, ge=0)
    probe_tail_lines: int = Field(default=BACKEND_LOG_TAIL_LINES, ge=1)
    cluster_create_max_retries: int = Field(default=DEFAULT_CLUSTER_CREATE_MAX_RETRIES, ge=1, le=10)


def load_config(environment: Environment, **overrides) -> ResetConfig:
    """Resolve the configuration for an environment.

    Args:
        environment: Profile to start from.
        **overrides: CLI overrides; ``None`` values are ignored.

    Returns:
        The resolved configuration.

    Raises:
        ConfigurationError: If the environment has no profile.
    """
    profile = profile_value(environment.value)
    if profile is None:
        raise ConfigurationError(f"No profile defined for environment '{environment.value}'")

    from_env = ResetConfig()
    values = {**profile, "environment": environment}
    values.update(from_env.model_dump(include=from_env.model_fields_set))
    cfg = ResetConfig(**values)

    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        cfg = cfg.model_copy(update=updates)
    return cfg


def validate_options(cfg: ResetConfig, mode: ResetMode) -> None:
    """Reject option combinations the selected environment cannot honour.

    Raises:
        ConfigurationError: If the combination is invalid.
    """
    if mode is ResetMode.NUKE:
        if not cfg.allow_nuke:
            raise ConfigurationError(
                f"--nuke is not available for the {cfg.environment.value} environment"
            )
        if not cfg.cluster_name:
            raise ConfigurationError("--nuke requires a cluster name (RESET_CLUSTER_NAME)")
        if not cfg.seed_dataset:
            raise ConfigurationError("--nuke requires a seed dataset (RESET_SEED_DATASET)")
    if mode is ResetMode.NUKE and cfg.reap_strategy is not ReapStrategy.NAMESPACE:
        raise ConfigurationError("--nuke requires the namespace reap strategy")


def display_config(cfg: ResetConfig, mode: ResetMode) -> None:
    """Print the resolved configuration summary."""
    title = "\U0001f525 NUKE MODE - Full cluster reset" if mode is ResetMode.NUKE else "\U0001f504 Quick reset mode"
    console.print(f"[bold blue]==>[/bold blue] {title} ({cfg.environment.value})")
    console.print(f"   Context:   {cfg.expected_context}")
    console.print(f"   Namespace: {cfg.namespace}")
    console.print(f"   Overlay:   {cfg.overlay}")
    if mode is ResetMode.NUKE:
        console.print(f"   Cluster:   {cfg.cluster_name}")
        console.print(f"   Seed:      {cfg.seed_dataset}")
