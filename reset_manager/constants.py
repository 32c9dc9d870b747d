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

"""Constants, environment profile loading, and profile_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# -- Resolved paths --
PACKAGE_DIR = Path(__file__).resolve().parent


def load_profiles() -> dict:
    """Load per-environment reset profiles from environments.yaml.

    Returns:
        Parsed YAML content keyed by environment name.
    """
    profiles_file = PACKAGE_DIR / "environments.yaml"
    with open(profiles_file) as f:
        return yaml.safe_load(f)


PROFILES = load_profiles()


def profile_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the PROFILES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = PROFILES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Namespace reaping --
NAMESPACE_DELETE_TIMEOUT_SECONDS = 120
NAMESPACE_POLL_INTERVAL_SECONDS = 2
OVERLAY_SETTLE_SECONDS = 5

# -- Storage claims --
PVC_BIND_TIMEOUT_SECONDS = 60
PVC_POLL_INTERVAL_SECONDS = 3

# -- Pod readiness --
POD_READY_TIMEOUT_SECONDS = 300
POD_POLL_INTERVAL_SECONDS = 3

# -- Backend probe --
BACKEND_PROBE_MAX_ATTEMPTS = 12
BACKEND_PROBE_INTERVAL_SECONDS = 5
BACKEND_LOG_TAIL_LINES = 20
DEFAULT_READY_MARKER = "Booting worker"

# -- Progress rendering --
SPINNER_NAME = "dots"
SPINNER_REFRESH_PER_SECOND = 10

# -- k3d cluster --
DEFAULT_CLUSTER_NAME = "specify-test"
DEFAULT_CLUSTER_CREATE_MAX_RETRIES = 2
CLUSTER_CREATE_RETRY_WAIT_SECONDS = 10
CLUSTER_TIMEOUT = "120s"
K3D_CONTEXT_PREFIX = "k3d-"
SEED_DIR = "/tmp/specify-init"
SEED_FILE_NAME = "init.sql"

# -- Kubernetes --
DEFAULT_NAMESPACE = "herbarium-specify"
DEFAULT_CLAIM_NAME = "specify-storage"
DEFAULT_DEPLOYMENT = "specify"
KUBECTL_TIMEOUT_SECONDS = 30
KUBECTL_APPLY_TIMEOUT_SECONDS = 300
NOT_FOUND_KEYWORDS = ("NotFound", "not found")
ALREADY_EXISTS_KEYWORDS = ("AlreadyExists", "already exists")
NO_CONTEXT = "none"

# -- Port forwarding --
DEFAULT_SERVICE = "nginx"
DEFAULT_LOCAL_PORT = 8000
DEFAULT_REMOTE_PORT = 80
PORT_RELEASE_WAIT_SECONDS = 1
