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

"""Cancellable clock used by every polling loop."""

from __future__ import annotations

import threading
import time

from reset_manager.errors import OperationCancelled


class Clock:
    """Monotonic time source with a sleep that can be cancelled.

    Polling loops take a clock instead of calling ``time.sleep`` directly so
    that tests can substitute a clock that fast-forwards.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Block for *seconds* unless the clock is cancelled first.

        Raises:
            OperationCancelled: If :meth:`cancel` was called before or during the wait.
        """
        if self._cancelled.wait(max(seconds, 0)):
            raise OperationCancelled("Wait cancelled")

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()
