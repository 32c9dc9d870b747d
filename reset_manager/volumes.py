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

"""Waiting for a PersistentVolumeClaim to bind."""

from __future__ import annotations

from reset_manager.clock import Clock
from reset_manager.constants import PVC_BIND_TIMEOUT_SECONDS, PVC_POLL_INTERVAL_SECONDS
from reset_manager.kube import KubeClient
from reset_manager.models import PollOutcome, VolumeClaimObservation, VolumeClaimPhase
from reset_manager.polling import poll
from reset_manager.progress import ProgressReporter


def wait_bound(
    client: KubeClient,
    claim: str,
    namespace: str,
    *,
    clock: Clock,
    timeout: float = PVC_BIND_TIMEOUT_SECONDS,
    interval: float = PVC_POLL_INTERVAL_SECONDS,
) -> PollOutcome:
    """Poll a claim until it is Bound or the timeout elapses.

    Args:
        client: Cluster client.
        claim: PersistentVolumeClaim name.
        namespace: Namespace of the claim.
        clock: Clock for the polling loop.
        timeout: Seconds to wait for binding.
        interval: Seconds between checks.

    Returns:
        The poll outcome; ``last_observed`` is the last VolumeClaimObservation.
    """
    def _render(observed: VolumeClaimObservation, elapsed: float) -> None:
        reporter.update(f"Waiting for PVC (status: {observed.phase.value})... {int(elapsed)}s")

    with ProgressReporter(f"Waiting for PVC {claim} to bind") as reporter:
        outcome = poll(
            lambda: client.get_claim(claim, namespace),
            lambda observed: observed.phase is VolumeClaimPhase.BOUND,
            timeout=timeout,
            interval=interval,
            clock=clock,
            on_tick=_render,
            label=f"pvc/{claim}",
        )
        if not outcome.succeeded:
            reporter.fail()
    return outcome
