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

"""Cluster subcommands (create, delete, seed)."""

from __future__ import annotations

import typer

from reset_manager.config import load_config
from reset_manager.models import Environment
from reset_manager.provisioner import ClusterProvisioner

app = typer.Typer(help="Manage the local k3d cluster.")


def _dev_config(cluster_name: str | None, seed_dataset: str | None = None):
    return load_config(Environment.DEV, cluster_name=cluster_name, seed_dataset=seed_dataset)


@app.command()
def create(
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="k3d cluster name"),
) -> None:
    """Create the k3d cluster."""
    cfg = _dev_config(cluster_name)
    ClusterProvisioner(max_retries=cfg.cluster_create_max_retries).create_cluster(cfg.cluster_name)


@app.command()
def delete(
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="k3d cluster name"),
) -> None:
    """Delete the k3d cluster (a missing cluster is not an error)."""
    cfg = _dev_config(cluster_name)
    ClusterProvisioner().delete_cluster(cfg.cluster_name)


@app.command()
def seed(
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="k3d cluster name"),
    seed_dataset: str | None = typer.Option(None, "--seed-dataset", help="SQL dump to copy into the cluster"),
) -> None:
    """Copy the seed dataset into the cluster's server node."""
    cfg = _dev_config(cluster_name, seed_dataset)
    ClusterProvisioner().seed(cfg.cluster_name, cfg.seed_dataset)
