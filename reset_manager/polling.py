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

"""Fixed-interval bounded polling built on tenacity."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from reset_manager import logger
from reset_manager.clock import Clock
from reset_manager.models import PollOutcome


def attempts_for(timeout: float, interval: float) -> int:
    """Number of checks needed so the last one happens at or after *timeout*.

    Args:
        timeout: Polling budget in seconds.
        interval: Seconds between checks.

    Returns:
        Check count, including the immediate first check.
    """
    return math.ceil(timeout / interval) + 1


def poll(
    observe: Callable[[], Any],
    done: Callable[[Any], bool],
    *,
    timeout: float,
    interval: float,
    clock: Clock,
    on_tick: Callable[[Any, float], None] | None = None,
    label: str = "condition",
) -> PollOutcome:
    """Observe on a fixed interval until *done* holds or the budget runs out.

    The first observation happens immediately; each following one waits
    *interval* seconds on *clock*. Exhausting the budget yields a failed
    outcome instead of raising.

    Args:
        observe: Reads the current state.
        done: Decides whether an observed state satisfies the wait.
        timeout: Polling budget in seconds.
        interval: Seconds between observations.
        clock: Clock providing time and the (cancellable) sleep.
        on_tick: Called with each observation and the elapsed seconds.
        label: Name used in debug logs.

    Returns:
        The poll outcome, carrying the last observation.
    """
    start = clock.monotonic()
    state: dict[str, Any] = {"last": None, "attempts": 0}

    def _check() -> bool:
        observed = observe()
        state["last"] = observed
        state["attempts"] += 1
        elapsed = clock.monotonic() - start
        logger.debug("Poll %s #%d at %.1fs: %s", label, state["attempts"], elapsed, observed)
        if on_tick is not None:
            on_tick(observed, elapsed)
        return done(observed)

    retrying = Retrying(
        stop=stop_after_attempt(attempts_for(timeout, interval)),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda ok: not ok),
        sleep=clock.sleep,
    )
    try:
        succeeded = retrying(_check)
    except RetryError:
        succeeded = False

    return PollOutcome(
        succeeded=succeeded,
        elapsed=clock.monotonic() - start,
        last_observed=state["last"],
        attempts=state["attempts"],
    )
