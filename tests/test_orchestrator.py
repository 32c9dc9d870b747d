"""Scenario tests for the reset orchestration."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from reset_manager.errors import (
    ClusterProvisionError,
    ContextMismatch,
    NamespaceDeletionTimeout,
    SeedDatasetMissing,
)
from reset_manager.models import NamespaceState, PodObservation, PodPhase, ReadyCounts, ResetMode
from reset_manager.orchestrator import ResetOrchestrator
from reset_manager.provisioner import ClusterProvisioner

from tests.conftest import NAMESPACE, FakeCluster

MUTATING_CALLS = ("delete_namespace", "create_namespace", "apply_overlay", "delete_overlay")


def _orchestrator(cfg, cluster, clock, provisioner=None, confirm=None) -> ResetOrchestrator:
    return ResetOrchestrator(cfg, client=cluster, clock=clock,
                             provisioner=provisioner or MagicMock(spec=ClusterProvisioner), confirm=confirm)


class TestQuickReset:
    """Quick (namespace-only) reset scenarios."""

    def test_happy_path(self, dev_config, clock) -> None:
        cfg = dev_config.model_copy(update={"namespace": "ns1"})
        cluster = FakeCluster(namespace="ns1", existing_pods=[PodObservation("specify-0", 0, 1, PodPhase.PENDING)])

        report = _orchestrator(cfg, cluster, clock).run(ResetMode.QUICK)

        assert report.reap.succeeded is True
        assert report.reap.elapsed <= 10
        assert report.applied is True
        assert report.claim.succeeded is True
        assert report.readiness.succeeded is True
        assert report.readiness.last_observed == ReadyCounts(ready=3, total=3)
        assert report.backend.succeeded is True
        assert report.degraded is False
        assert cluster.namespaces["ns1"] is NamespaceState.EXISTS

    def test_steps_run_in_order(self, dev_config, clock, cluster) -> None:
        _orchestrator(dev_config, cluster, clock).run()

        order = [call[0] for call in cluster.calls]
        first = {name: order.index(name) for name in
                 ("current_context", "delete_namespace", "create_namespace", "apply_overlay",
                  "get_claim", "list_pods", "tail_logs", "pods_table")}
        assert sorted(first, key=first.get) == list(first)

    def test_reset_twice_reaches_same_ready_state(self, dev_config, clock, cluster) -> None:
        orchestrator = _orchestrator(dev_config, cluster, clock)

        first = orchestrator.run()
        pods_after_first = sorted(pod.name for pod in cluster.pods[NAMESPACE])
        second = orchestrator.run()

        assert first.readiness.succeeded and second.readiness.succeeded
        assert first.readiness.last_observed == second.readiness.last_observed
        assert sorted(pod.name for pod in cluster.pods[NAMESPACE]) == pods_after_first
        assert all(pod.ready or pod.completed for pod in cluster.pods[NAMESPACE])
        assert cluster.generation == 2

    def test_namespace_deletion_timeout_aborts(self, dev_config, clock) -> None:
        cluster = FakeCluster(delete_ticks=10_000)

        with pytest.raises(NamespaceDeletionTimeout):
            _orchestrator(dev_config, cluster, clock).run()
        assert not cluster.called("apply_overlay")

    def test_non_fatal_failures_continue(self, dev_config, clock) -> None:
        cluster = FakeCluster(apply_ok=False, claim_phases=["Pending"], logs="")

        report = _orchestrator(dev_config, cluster, clock).run()

        assert report.applied is False
        assert report.claim.succeeded is False
        assert report.readiness.succeeded is False
        assert report.backend.succeeded is False
        assert len(report.warnings) == 4
        assert cluster.called("claims_table")
        assert cluster.called("pods_table")
        names = [call[0] for call in cluster.calls]
        assert names.index("pods_table") < names.index("tail_logs")

    def test_pod_table_printed_when_readiness_times_out(self, dev_config, clock) -> None:
        cluster = FakeCluster(ready_after=10_000)

        report = _orchestrator(dev_config, cluster, clock).run()

        names = [call[0] for call in cluster.calls]
        assert report.readiness.succeeded is False
        assert names.index("pods_table") < names.index("tail_logs")
        assert names.count("pods_table") == 2

    def test_backend_marker_never_seen_is_only_a_warning(self, dev_config, clock) -> None:
        cluster = FakeCluster(logs="Running migrations")

        report = _orchestrator(dev_config, cluster, clock).run()

        assert report.readiness.succeeded is True
        assert report.backend.succeeded is False
        assert report.backend.attempts == 12
        assert report.warnings == ["Could not confirm Specify backend is ready, but continuing..."]

    def test_port_forward_opened_when_configured(self, dev_config, clock, cluster, monkeypatch) -> None:
        cfg = dev_config.model_copy(update={"port_forward": True})
        orchestrator = _orchestrator(cfg, cluster, clock)
        opened = MagicMock()
        monkeypatch.setattr(orchestrator, "open_tunnel", opened)

        orchestrator.run()

        opened.assert_called_once_with()


class TestContextGuard:
    """Context mismatch scenarios."""

    def test_wrong_context_issues_no_mutations(self, uat_config, clock) -> None:
        cluster = FakeCluster(context="wrong-ctx")

        with pytest.raises(ContextMismatch):
            _orchestrator(uat_config, cluster, clock).run()
        assert not any(cluster.called(name) for name in MUTATING_CALLS)

    def test_dev_switch_declined(self, dev_config, clock) -> None:
        cluster = FakeCluster(context="other")

        with pytest.raises(ContextMismatch):
            _orchestrator(dev_config, cluster, clock, confirm=lambda _: False).run()
        assert not any(cluster.called(name) for name in MUTATING_CALLS)


class TestUatReset:
    """Overlay-strategy reset (namespace kept)."""

    def test_namespace_is_not_deleted(self, uat_config, clock) -> None:
        cluster = FakeCluster(context="az-aks-oim03")

        report = _orchestrator(uat_config, cluster, clock).run()

        assert not cluster.called("delete_namespace")
        assert cluster.called("delete_overlay")
        assert report.readiness.succeeded is True
        assert report.reap is None
        assert 30 in clock.sleeps


class TestNukeReset:
    """Nuke (cluster rebuild) scenarios."""

    def test_rebuild_then_create_namespace(self, dev_config, clock) -> None:
        cluster = FakeCluster(context="none", namespace_exists=False)
        provisioner = MagicMock(spec=ClusterProvisioner)

        def _rebuild(name: str, seed: str) -> None:
            cluster.context = f"k3d-{name}"

        provisioner.rebuild.side_effect = _rebuild

        report = _orchestrator(dev_config, cluster, clock, provisioner=provisioner).run(ResetMode.NUKE)

        provisioner.rebuild.assert_called_once_with("specify-test", dev_config.seed_dataset)
        assert not cluster.called("delete_namespace")
        assert cluster.called("create_namespace")
        assert report.readiness.succeeded is True

    def test_missing_seed_file_never_creates_namespace(self, dev_config, clock) -> None:
        cluster = FakeCluster(context="k3d-specify-test", namespace_exists=False)
        provisioner = MagicMock(spec=ClusterProvisioner)
        provisioner.rebuild.side_effect = SeedDatasetMissing("kustomize/base/specify_dev_dump.sql")

        with pytest.raises(SeedDatasetMissing):
            _orchestrator(dev_config, cluster, clock, provisioner=provisioner).run(ResetMode.NUKE)
        assert not cluster.called("create_namespace")
        assert not cluster.called("apply_overlay")

    def test_cluster_create_failure_is_fatal(self, dev_config, clock) -> None:
        cluster = FakeCluster(namespace_exists=False)
        provisioner = MagicMock(spec=ClusterProvisioner)
        provisioner.rebuild.side_effect = ClusterProvisionError("boom")

        with pytest.raises(ClusterProvisionError):
            _orchestrator(dev_config, cluster, clock, provisioner=provisioner).run(ResetMode.NUKE)

    def test_context_still_wrong_after_rebuild(self, dev_config, clock) -> None:
        cluster = FakeCluster(context="other", namespace_exists=False)

        with pytest.raises(ContextMismatch):
            _orchestrator(dev_config, cluster, clock).run(ResetMode.NUKE)
        assert not cluster.called("create_namespace")


class TestPrerequisites:
    """Command-line tools are checked before anything touches the cluster."""

    def test_quick_reset_needs_kubectl_only(self, dev_config, clock, cluster, toolbox) -> None:
        _orchestrator(dev_config, cluster, clock).run()

        assert toolbox.checked == ["kubectl"]

    def test_nuke_and_port_forward_add_tools(self, dev_config, clock, toolbox, monkeypatch) -> None:
        cfg = dev_config.model_copy(update={"port_forward": True})
        cluster = FakeCluster(namespace_exists=False)
        orchestrator = _orchestrator(cfg, cluster, clock)
        monkeypatch.setattr(orchestrator, "open_tunnel", MagicMock())

        orchestrator.run(ResetMode.NUKE)

        assert toolbox.checked == ["kubectl", "k3d", "docker", "lsof"]

    def test_missing_tool_stops_before_any_cluster_call(self, dev_config, clock, cluster, toolbox) -> None:
        toolbox.missing = {"kubectl"}
        provisioner = MagicMock(spec=ClusterProvisioner)

        with pytest.raises(RuntimeError, match="kubectl"):
            _orchestrator(dev_config, cluster, clock, provisioner=provisioner).run(ResetMode.NUKE)
        assert cluster.calls == []
        provisioner.rebuild.assert_not_called()
