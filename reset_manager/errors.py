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

"""Error types raised by reset steps."""

from __future__ import annotations


class ResetError(RuntimeError):
    """Base class for failures that abort a reset."""


class ConfigurationError(ResetError):
    """The requested options are not valid for the selected environment."""


class ContextMismatch(ResetError):
    """The active kubectl context is not the one the environment expects."""

    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(
            f"Wrong kubectl context: '{actual}' (expected '{expected}'). "
            f"Switch with: kubectl config use-context {expected}"
        )
        self.actual = actual
        self.expected = expected


class NamespaceDeletionTimeout(ResetError):
    def __init__(self, namespace: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s waiting for namespace '{namespace}' to be deleted")
        self.namespace = namespace
        self.timeout = timeout


class ClusterProvisionError(ResetError):
    """The k3d cluster could not be (re)created or seeded."""


class SeedDatasetMissing(ResetError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Seed dataset not found: {path}")
        self.path = path


class OperationCancelled(ResetError):
    """A wait was cancelled before its timeout elapsed."""
