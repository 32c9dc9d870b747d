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

"""Log-based confirmation that the backend finished booting."""

from __future__ import annotations

from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from reset_manager import logger
from reset_manager.clock import Clock
from reset_manager.constants import (
    BACKEND_LOG_TAIL_LINES,
    BACKEND_PROBE_INTERVAL_SECONDS,
    BACKEND_PROBE_MAX_ATTEMPTS,
)
from reset_manager.kube import KubeClient
from reset_manager.models import PollOutcome
from reset_manager.progress import ProgressReporter


def confirm_ready(
    client: KubeClient,
    namespace: str,
    deployment: str,
    marker: str,
    *,
    clock: Clock,
    initial_delay: float,
    max_attempts: int = BACKEND_PROBE_MAX_ATTEMPTS,
    attempt_interval: float = BACKEND_PROBE_INTERVAL_SECONDS,
    tail_lines: int = BACKEND_LOG_TAIL_LINES,
) -> PollOutcome:
    """Look for *marker* in the deployment's recent logs.

    Waits *initial_delay* first so startup migrations can begin, then tails
    the last *tail_lines* lines up to *max_attempts* times. The probe is
    advisory: exhausting the attempts returns a failed outcome.

    Args:
        client: Cluster client.
        namespace: Namespace of the deployment.
        deployment: Deployment whose logs are tailed.
        marker: Substring that confirms readiness.
        clock: Clock for the delay and between attempts.
        initial_delay: Seconds to wait before the first attempt.
        max_attempts: Number of log checks.
        attempt_interval: Seconds between log checks.
        tail_lines: Number of recent log lines to inspect.

    Returns:
        The probe outcome; ``last_observed`` is the attempt number reached.
    """
    start = clock.monotonic()
    attempts = 0

    with ProgressReporter("Checking backend") as reporter:
        reporter.update(f"Checking backend (waiting {initial_delay:g}s for startup)")
        clock.sleep(initial_delay)

        def _probe() -> bool:
            nonlocal attempts
            attempts += 1
            reporter.update(f"Checking backend (attempt {attempts}/{max_attempts})")
            found = marker in client.tail_logs(namespace, deployment, tail_lines)
            logger.debug("Backend probe %d/%d: marker %s", attempts, max_attempts, "found" if found else "absent")
            return found

        retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_fixed(attempt_interval),
            retry=retry_if_result(lambda found: not found),
            sleep=clock.sleep,
        )
        try:
            succeeded = retrying(_probe)
        except RetryError:
            succeeded = False
        if not succeeded:
            reporter.fail()

    return PollOutcome(
        succeeded=succeeded,
        elapsed=clock.monotonic() - start,
        last_observed=attempts,
        attempts=attempts,
    )
