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

"""Observation types, enums, and poll outcomes shared across reset steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResetMode(str, Enum):
    """How much of the environment a reset tears down."""

    QUICK = "quick"
    NUKE = "nuke"


class Environment(str, Enum):
    """Target environment profile."""

    DEV = "dev"
    UAT = "uat"


class ReapStrategy(str, Enum):
    """How the namespace contents are removed before redeploying.

    ``namespace`` deletes and recreates the namespace object itself.
    ``overlay`` deletes only the resources named by the overlay, for clusters
    where the operator may not delete namespaces.
    """

    NAMESPACE = "namespace"
    OVERLAY = "overlay"


class NamespaceState(str, Enum):
    EXISTS = "Exists"
    TERMINATING = "Terminating"
    ABSENT = "Absent"


class PodPhase(str, Enum):
    """Pod lifecycle phase as shown by ``kubectl get pods``.

    Kubernetes reports finished one-shot pods as ``Succeeded``; kubectl
    displays them as ``Completed`` and so do we.
    """

    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def from_api(cls, phase: str | None) -> PodPhase:
        if phase == "Succeeded":
            return cls.COMPLETED
        try:
            return cls(phase)
        except ValueError:
            return cls.UNKNOWN


class VolumeClaimPhase(str, Enum):
    UNKNOWN = "Unknown"
    PENDING = "Pending"
    BOUND = "Bound"
    LOST = "Lost"

    @classmethod
    def from_api(cls, phase: str | None) -> VolumeClaimPhase:
        try:
            return cls(phase)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class PodObservation:
    """Snapshot of a single pod taken on one poll tick.

    Attributes:
        name: Pod name.
        ready_containers: Number of containers reporting ready.
        total_containers: Number of containers declared in the pod spec.
        phase: Pod lifecycle phase.
    """

    name: str
    ready_containers: int
    total_containers: int
    phase: PodPhase = PodPhase.UNKNOWN

    @property
    def ready(self) -> bool:
        return self.ready_containers == self.total_containers

    @property
    def completed(self) -> bool:
        return self.phase is PodPhase.COMPLETED


@dataclass(frozen=True)
class VolumeClaimObservation:
    name: str
    phase: VolumeClaimPhase = VolumeClaimPhase.UNKNOWN


@dataclass(frozen=True)
class ReadyCounts:
    """Ready/total pod counts over the non-completed pods of a namespace."""

    ready: int
    total: int

    def __str__(self) -> str:
        return f"{self.ready}/{self.total}"


@dataclass(frozen=True)
class PollOutcome:
    """Result of a bounded polling loop.

    A timeout is a normal, failed outcome rather than an exception.

    Attributes:
        succeeded: Whether the awaited condition was observed.
        elapsed: Seconds spent polling, measured on the loop's clock.
        last_observed: The last value the loop observed (state, phase, counts).
        attempts: Number of checks performed.
    """

    succeeded: bool
    elapsed: float
    last_observed: Any = None
    attempts: int = 0


@dataclass
class ResetReport:
    """Per-step outcomes of one reset run, used for the final summary."""

    mode: ResetMode
    reap: PollOutcome | None = None
    applied: bool | None = None
    claim: PollOutcome | None = None
    readiness: PollOutcome | None = None
    backend: PollOutcome | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)
