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

"""Pod readiness aggregation and the readiness wait."""

from __future__ import annotations

from collections.abc import Iterable

from reset_manager.clock import Clock
from reset_manager.constants import POD_POLL_INTERVAL_SECONDS, POD_READY_TIMEOUT_SECONDS
from reset_manager.kube import KubeClient
from reset_manager.models import PodObservation, PollOutcome, ReadyCounts
from reset_manager.polling import poll
from reset_manager.progress import ProgressReporter


def count_ready(pods: Iterable[PodObservation]) -> ReadyCounts:
    """Count ready pods, ignoring Completed ones.

    Args:
        pods: Pods observed in the namespace.

    Returns:
        Ready and total counts over the non-completed pods.
    """
    active = [pod for pod in pods if not pod.completed]
    return ReadyCounts(ready=sum(1 for pod in active if pod.ready), total=len(active))


def all_ready(counts: ReadyCounts) -> bool:
    """Whether the namespace is ready: at least one pod, none of them not ready.

    An empty namespace means nothing has been scheduled yet, so it is not ready.
    """
    return counts.total > 0 and counts.ready == counts.total


def wait_ready(
    client: KubeClient,
    namespace: str,
    *,
    clock: Clock,
    timeout: float = POD_READY_TIMEOUT_SECONDS,
    interval: float = POD_POLL_INTERVAL_SECONDS,
) -> PollOutcome:
    """Poll pods until every non-completed pod is ready or the timeout elapses.

    Args:
        client: Cluster client.
        namespace: Namespace to watch.
        clock: Clock for the polling loop.
        timeout: Seconds to wait for readiness.
        interval: Seconds between checks.

    Returns:
        The poll outcome; ``last_observed`` is the last ReadyCounts.
    """
    with ProgressReporter("Waiting for pods to be ready") as reporter:
        outcome = poll(
            lambda: count_ready(client.list_pods(namespace)),
            all_ready,
            timeout=timeout,
            interval=interval,
            clock=clock,
            on_tick=lambda counts, _: reporter.update(f"Pods ready: {counts}"),
            label=f"pods/{namespace}",
        )
        if not outcome.succeeded:
            reporter.fail()
    return outcome
