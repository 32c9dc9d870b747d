"""Shared fixtures: a fast-forwarding clock and an in-memory cluster."""

from __future__ import annotations

import pytest

from reset_manager import orchestrator as orchestrator_module
from reset_manager.clock import Clock
from reset_manager.config import ResetConfig, load_config
from reset_manager.models import (
    Environment,
    NamespaceState,
    PodObservation,
    PodPhase,
    VolumeClaimObservation,
    VolumeClaimPhase,
)

NAMESPACE = "herbarium-specify"
WORKLOADS = ("specify", "mariadb", "nginx")


class FakeClock(Clock):
    """Clock whose sleep advances virtual time instantly."""

    def __init__(self) -> None:
        super().__init__()
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        if self.cancelled:
            super().sleep(0)
        self.sleeps.append(seconds)
        self.now += seconds


class FakeCluster:
    """In-memory stand-in for KubeClient.

    Deleting a namespace leaves it Terminating for ``delete_ticks`` state
    reads. Applying the overlay schedules the workloads not ready; they
    become ready after ``ready_after`` pod listings. A completed init job is
    always present after an apply.
    """

    def __init__(
        self,
        context: str = "k3d-specify-test",
        *,
        namespace: str = NAMESPACE,
        existing_pods: list[PodObservation] | None = None,
        delete_ticks: int = 2,
        ready_after: int = 2,
        claim_phases: list[str] | None = None,
        logs: str = "[INFO] Booting worker with pid: 42",
        apply_ok: bool = True,
        namespace_exists: bool = True,
    ) -> None:
        self.context = context
        self.namespace = namespace
        self.namespaces: dict[str, NamespaceState] = {}
        self.pods: dict[str, list[PodObservation]] = {}
        if namespace_exists:
            self.namespaces[namespace] = NamespaceState.EXISTS
            self.pods[namespace] = list(existing_pods or [])
        self.delete_ticks = delete_ticks
        self.ready_after = ready_after
        self.claim_phases = list(claim_phases or ["Pending", "Bound"])
        self.logs = logs
        self.apply_ok = apply_ok
        self.calls: list[tuple] = []
        self.generation = 0
        self._terminating: dict[str, int] = {}
        self._not_ready_listings = 0

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)

    # -- KubeClient surface --

    def current_context(self) -> str:
        self.calls.append(("current_context",))
        return self.context

    def use_context(self, context: str) -> bool:
        self.calls.append(("use_context", context))
        self.context = context
        return True

    def namespace_state(self, namespace: str) -> NamespaceState:
        self.calls.append(("namespace_state", namespace))
        state = self.namespaces.get(namespace, NamespaceState.ABSENT)
        if state is NamespaceState.TERMINATING:
            if self._terminating[namespace] <= 0:
                del self.namespaces[namespace]
                self.pods.pop(namespace, None)
                return NamespaceState.ABSENT
            self._terminating[namespace] -= 1
        return state

    def delete_namespace(self, namespace: str) -> bool:
        self.calls.append(("delete_namespace", namespace))
        if namespace in self.namespaces:
            self.namespaces[namespace] = NamespaceState.TERMINATING
            self._terminating[namespace] = self.delete_ticks
        return True

    def create_namespace(self, namespace: str) -> bool:
        self.calls.append(("create_namespace", namespace))
        if namespace not in self.namespaces:
            self.namespaces[namespace] = NamespaceState.EXISTS
            self.pods[namespace] = []
            self.generation += 1
        return True

    def apply_overlay(self, overlay: str) -> bool:
        self.calls.append(("apply_overlay", overlay))
        if not self.apply_ok:
            return False
        if self.namespaces.get(self.namespace) is NamespaceState.EXISTS:
            existing = {pod.name for pod in self.pods[self.namespace]}
            for name in WORKLOADS:
                if f"{name}-0" not in existing:
                    self.pods[self.namespace].append(PodObservation(f"{name}-0", 0, 1, PodPhase.PENDING))
            if "init-job" not in existing:
                self.pods[self.namespace].append(PodObservation("init-job", 0, 1, PodPhase.COMPLETED))
            self._not_ready_listings = self.ready_after
        return True

    def delete_overlay(self, overlay: str, namespace: str) -> bool:
        self.calls.append(("delete_overlay", overlay, namespace))
        self.pods[namespace] = []
        return True

    def list_pods(self, namespace: str) -> list[PodObservation]:
        self.calls.append(("list_pods", namespace))
        pods = self.pods.get(namespace, [])
        if self._not_ready_listings > 0:
            self._not_ready_listings -= 1
            return list(pods)
        self.pods[namespace] = [
            pod if pod.completed else PodObservation(pod.name, pod.total_containers, pod.total_containers,
                                                     PodPhase.RUNNING)
            for pod in pods
        ]
        return list(self.pods[namespace])

    def get_claim(self, name: str, namespace: str) -> VolumeClaimObservation:
        self.calls.append(("get_claim", name, namespace))
        phase = self.claim_phases.pop(0) if len(self.claim_phases) > 1 else self.claim_phases[0]
        return VolumeClaimObservation(name=name, phase=VolumeClaimPhase.from_api(phase))

    def tail_logs(self, namespace: str, deployment: str, lines: int) -> str:
        self.calls.append(("tail_logs", namespace, deployment, lines))
        return self.logs

    def pods_table(self, namespace: str) -> str:
        self.calls.append(("pods_table", namespace))
        rows = [f"{pod.name}  {pod.ready_containers}/{pod.total_containers}  {pod.phase.value}"
                for pod in self.pods.get(namespace, [])]
        return "\n".join(["NAME  READY  STATUS", *rows])

    def claims_table(self, namespace: str) -> str:
        self.calls.append(("claims_table", namespace))
        return "NAME  STATUS"


class FakeToolbox:
    """Stand-in for require_command that records checks and fails on *missing*."""

    def __init__(self) -> None:
        self.checked: list[str] = []
        self.missing: set[str] = set()

    def __call__(self, cmd: str) -> None:
        self.checked.append(cmd)
        if cmd in self.missing:
            raise RuntimeError(f"Required command '{cmd}' not found. Please install it first.")


@pytest.fixture(autouse=True)
def toolbox(monkeypatch: pytest.MonkeyPatch) -> FakeToolbox:
    box = FakeToolbox()
    monkeypatch.setattr(orchestrator_module, "require_command", box)
    return box


@pytest.fixture(autouse=True)
def _clean_reset_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RESET_* variables from the developer's shell out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("RESET_"):
            monkeypatch.delenv(key)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def dev_config() -> ResetConfig:
    return load_config(Environment.DEV, port_forward=False)


@pytest.fixture
def uat_config() -> ResetConfig:
    return load_config(Environment.UAT)
