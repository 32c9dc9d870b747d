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

"""Utility functions for kubectl invocation, error classification, and command checks."""

from __future__ import annotations

import subprocess

import sh

from reset_manager import logger
from reset_manager.constants import ALREADY_EXISTS_KEYWORDS, KUBECTL_TIMEOUT_SECONDS, NOT_FOUND_KEYWORDS


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        RuntimeError: If the command is not found.
    """
    try:
        found = sh.which(cmd)
    except sh.ErrorReturnCode as err:
        raise RuntimeError(f"Required command '{cmd}' not found. Please install it first.") from err
    if not found:
        raise RuntimeError(f"Required command '{cmd}' not found. Please install it first.")


def run_kubectl(args: list[str], timeout: float = KUBECTL_TIMEOUT_SECONDS) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because callers classify failures from
    stderr (NotFound, AlreadyExists), which needs stdout and stderr kept apart.

    Args:
        args: kubectl arguments (e.g. ``["get", "pods", "-n", "default"]``).
        timeout: Maximum seconds to wait for the command to complete.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    logger.debug("kubectl %s", " ".join(args))
    try:
        result = subprocess.run(
            ["kubectl", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


def is_not_found(stderr: str) -> bool:
    """Whether kubectl stderr reports a missing object."""
    return any(keyword in stderr for keyword in NOT_FOUND_KEYWORDS)


def is_already_exists(stderr: str) -> bool:
    return any(keyword in stderr for keyword in ALREADY_EXISTS_KEYWORDS)
