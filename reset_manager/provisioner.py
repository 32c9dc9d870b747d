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

"""k3d cluster rebuild and seed dataset loading (nuke mode)."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

import docker
import sh
from rich.panel import Panel
from tenacity import retry, stop_after_attempt, wait_fixed

from reset_manager import console, logger
from reset_manager.constants import (
    CLUSTER_CREATE_RETRY_WAIT_SECONDS,
    CLUSTER_TIMEOUT,
    DEFAULT_CLUSTER_CREATE_MAX_RETRIES,
    SEED_DIR,
    SEED_FILE_NAME,
)
from reset_manager.errors import ClusterProvisionError, SeedDatasetMissing
from reset_manager.progress import track


def server_container_name(cluster_name: str) -> str:
    """Docker container name of the k3d server node."""
    return f"k3d-{cluster_name}-server-0"


def _tar_single_file(source: Path, arcname: str) -> bytes:
    """Pack one file into an in-memory tar archive for ``put_archive``."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        tar.add(str(source), arcname=arcname)
    return buf.getvalue()


class ClusterProvisioner:
    """Destroys and recreates a local k3d cluster and seeds it with a dataset.

    Args:
        max_retries: Cluster creation attempts before giving up.
        retry_wait: Seconds between creation attempts.
        seed_dir: Directory on the server node that receives the dataset.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_CLUSTER_CREATE_MAX_RETRIES,
        retry_wait: float = CLUSTER_CREATE_RETRY_WAIT_SECONDS,
        seed_dir: str = SEED_DIR,
    ) -> None:
        self.max_retries = max_retries
        self.retry_wait = retry_wait
        self.seed_dir = seed_dir

    def delete_cluster(self, cluster_name: str) -> bool:
        """Delete the k3d cluster; a missing cluster is only a warning.

        Returns:
            True if a cluster was deleted, False if none was found.
        """
        try:
            track("Deleting cluster", sh.k3d, "cluster", "delete", cluster_name)
            return True
        except sh.ErrorReturnCode:
            console.print(f"[yellow]⚠️  Cluster '{cluster_name}' not found or already deleted, continuing...[/yellow]")
            return False

    def create_cluster(self, cluster_name: str) -> None:
        """Create the k3d cluster with retry logic.

        Raises:
            ClusterProvisionError: If the cluster cannot be created after all retries.
        """
        @retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_wait),
            reraise=True,
        )
        def _attempt() -> None:
            sh.k3d("cluster", "create", cluster_name, "--timeout", CLUSTER_TIMEOUT, "--wait")

        try:
            track("Creating cluster", _attempt)
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace").strip() if isinstance(err.stderr, bytes) else str(err.stderr)
            raise ClusterProvisionError(f"Failed to create k3d cluster '{cluster_name}': {stderr[:300]}") from err
        console.print(f"[green]✅ Cluster '{cluster_name}' created[/green]")

    def seed(self, cluster_name: str, seed_dataset: str) -> None:
        """Copy the seed dataset into the server node's working directory.

        Raises:
            SeedDatasetMissing: If the dataset file does not exist.
            ClusterProvisionError: If the server container cannot be reached.
        """
        source = Path(seed_dataset)
        container_name = server_container_name(cluster_name)

        try:
            client = docker.from_env()
        except docker.errors.DockerException as err:
            raise ClusterProvisionError(f"Failed to connect to Docker: {err}") from err

        try:
            try:
                container = client.containers.get(container_name)
            except docker.errors.NotFound as err:
                raise ClusterProvisionError(f"Server container '{container_name}' not found") from err

            exit_code, output = container.exec_run(["mkdir", "-p", self.seed_dir])
            if exit_code != 0:
                raise ClusterProvisionError(
                    f"Failed to create {self.seed_dir} in {container_name}: {output!r}"
                )
            console.print(f"[green]✓[/green] Directory {self.seed_dir} created")

            if not source.is_file():
                raise SeedDatasetMissing(str(source))
            if not container.put_archive(self.seed_dir, _tar_single_file(source, SEED_FILE_NAME)):
                raise ClusterProvisionError(f"Failed to copy {source} into {container_name}")
            console.print(f"[green]✓[/green] Seed dataset copied to {self.seed_dir}/{SEED_FILE_NAME}")
        finally:
            client.close()

    def rebuild(self, cluster_name: str, seed_dataset: str) -> None:
        """Delete, recreate, and seed the cluster.

        Raises:
            ClusterProvisionError: If creation or seeding fails.
            SeedDatasetMissing: If the dataset file does not exist.
        """
        console.print(Panel.fit(f"Rebuilding k3d cluster {cluster_name}", style="bold blue"))
        self.delete_cluster(cluster_name)
        self.create_cluster(cluster_name)
        logger.info("Seeding cluster %s with %s", cluster_name, seed_dataset)
        self.seed(cluster_name, seed_dataset)
