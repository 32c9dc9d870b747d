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

"""Typed kubectl queries for namespaces, pods, claims, overlays, and logs."""

from __future__ import annotations

import json

from reset_manager import logger
from reset_manager.constants import KUBECTL_APPLY_TIMEOUT_SECONDS, NO_CONTEXT
from reset_manager.models import (
    NamespaceState,
    PodObservation,
    PodPhase,
    VolumeClaimObservation,
    VolumeClaimPhase,
)
from reset_manager.utils import is_already_exists, is_not_found, run_kubectl


def parse_pod(item: dict) -> PodObservation:
    """Build a pod observation from one item of ``kubectl get pods -o json``.

    Args:
        item: Pod object as returned by the API server.

    Returns:
        Observation with ready/total container counts and phase.
    """
    spec = item.get("spec", {}) or {}
    status = item.get("status", {}) or {}
    container_statuses = status.get("containerStatuses", []) or []
    total = len(spec.get("containers", []) or []) or len(container_statuses)
    return PodObservation(
        name=item.get("metadata", {}).get("name", ""),
        ready_containers=sum(1 for cs in container_statuses if cs.get("ready")),
        total_containers=total,
        phase=PodPhase.from_api(status.get("phase")),
    )


def parse_namespace(item: dict) -> NamespaceState:
    if item.get("metadata", {}).get("deletionTimestamp"):
        return NamespaceState.TERMINATING
    if item.get("status", {}).get("phase") == NamespaceState.TERMINATING.value:
        return NamespaceState.TERMINATING
    return NamespaceState.EXISTS


class KubeClient:
    """Structured access to the cluster through kubectl's JSON output.

    Delete and create calls return True when the desired end state holds,
    which includes "not found" on delete and "already exists" on create.
    """

    def current_context(self) -> str:
        ok, stdout, _ = run_kubectl(["config", "current-context"])
        return stdout.strip() if ok and stdout.strip() else NO_CONTEXT

    def use_context(self, context: str) -> bool:
        ok, _, stderr = run_kubectl(["config", "use-context", context])
        if not ok:
            logger.warning("Failed to switch context to %s: %s", context, stderr.strip())
        return ok

    def namespace_state(self, namespace: str) -> NamespaceState:
        ok, stdout, stderr = run_kubectl(["get", "namespace", namespace, "-o", "json"])
        if ok:
            return parse_namespace(json.loads(stdout))
        if is_not_found(stderr):
            return NamespaceState.ABSENT
        logger.debug("Could not read namespace %s: %s", namespace, stderr.strip())
        return NamespaceState.EXISTS

    def delete_namespace(self, namespace: str) -> bool:
        ok, _, stderr = run_kubectl(
            ["delete", "namespace", namespace, "--ignore-not-found=true", "--wait=false"],
        )
        return ok or is_not_found(stderr)

    def create_namespace(self, namespace: str) -> bool:
        ok, _, stderr = run_kubectl(["create", "namespace", namespace])
        if not ok and not is_already_exists(stderr):
            logger.error("Failed to create namespace %s: %s", namespace, stderr.strip())
            return False
        return True

    def list_pods(self, namespace: str) -> list[PodObservation]:
        ok, stdout, stderr = run_kubectl(["get", "pods", "-n", namespace, "-o", "json"])
        if not ok:
            logger.debug("Could not list pods in %s: %s", namespace, stderr.strip())
            return []
        return [parse_pod(item) for item in json.loads(stdout).get("items", [])]

    def get_claim(self, name: str, namespace: str) -> VolumeClaimObservation:
        ok, stdout, stderr = run_kubectl(["get", "pvc", name, "-n", namespace, "-o", "json"])
        if not ok:
            logger.debug("Could not read claim %s: %s", name, stderr.strip())
            return VolumeClaimObservation(name=name)
        phase = json.loads(stdout).get("status", {}).get("phase")
        return VolumeClaimObservation(name=name, phase=VolumeClaimPhase.from_api(phase))

    def apply_overlay(self, overlay: str) -> bool:
        ok, _, stderr = run_kubectl(["apply", "-k", overlay], timeout=KUBECTL_APPLY_TIMEOUT_SECONDS)
        if not ok:
            logger.warning("kubectl apply -k %s failed: %s", overlay, stderr.strip()[:500])
        return ok

    def delete_overlay(self, overlay: str, namespace: str) -> bool:
        ok, _, stderr = run_kubectl(
            ["delete", "-k", overlay, "-n", namespace, "--ignore-not-found=true"],
            timeout=KUBECTL_APPLY_TIMEOUT_SECONDS,
        )
        if not ok:
            logger.warning("kubectl delete -k %s failed: %s", overlay, stderr.strip()[:500])
        return ok or is_not_found(stderr)

    def tail_logs(self, namespace: str, deployment: str, lines: int) -> str:
        ok, stdout, _ = run_kubectl(["logs", "-n", namespace, f"deployment/{deployment}", f"--tail={lines}"])
        return stdout if ok else ""

    def pods_table(self, namespace: str) -> str:
        ok, stdout, stderr = run_kubectl(["get", "pods", "-n", namespace])
        return stdout if ok else stderr

    def claims_table(self, namespace: str) -> str:
        ok, stdout, stderr = run_kubectl(["get", "pvc", "-n", namespace])
        return stdout if ok else stderr
