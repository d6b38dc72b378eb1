"""
Unit tests for CostEstimator
"""
import pytest

from hibernator.core.errors import ClusterNotFound, RemoteUnavailable
from hibernator.services.cost import CostEstimator


@pytest.fixture
def estimator(gateway, store):
    return CostEstimator(
        gateway,
        store,
        worker_hourly_rate=1.0,
        master_hourly_rate=0.25,
        storage_hourly_rate=0.25,
    )


class TestCostEstimator:

    def test_active_cluster(self, estimator):
        info = estimator.estimate("demo")

        assert info.full_workers == 9
        assert info.hibernated_workers == 3
        assert info.current_workers == 9
        assert info.full_hourly_cost == pytest.approx(9.5)
        assert info.hibernated_hourly_cost == pytest.approx(3.5)
        assert info.full_monthly_cost == pytest.approx(6935.0)
        assert info.hibernated_monthly_cost == pytest.approx(2555.0)
        assert info.monthly_savings == pytest.approx(4380.0)
        assert info.savings_percent == pytest.approx(66.7)
        assert "$4,380.00" in info.notes[-1]

    def test_hibernated_cluster_uses_records(self, estimator, gateway, store):
        gateway.add_cluster("demo", {"default": (1, 3)})
        store.append_record("demo", "default", 3)

        info = estimator.estimate("demo")

        assert info.full_workers == 9
        assert info.hibernated_workers == 3
        assert info.current_workers == 3

    def test_master_keeps_billing(self, estimator):
        info = estimator.estimate("demo")
        assert info.hibernated_hourly_cost > info.hibernated_workers * info.worker_hourly_rate
        assert any("master" in note for note in info.notes)

    def test_rates_default_to_settings(self, gateway, store, isolated_settings):
        info = CostEstimator(gateway, store).estimate("demo")
        assert info.worker_hourly_rate == isolated_settings.WORKER_HOURLY_RATE
        assert info.master_hourly_rate == isolated_settings.MASTER_HOURLY_RATE

    def test_worker_query_failure_tolerated(self, estimator, gateway):
        gateway.worker_errors["demo"] = RemoteUnavailable("demo")
        info = estimator.estimate("demo")
        assert info.current_workers is None
        assert info.full_workers == 9

    def test_cluster_not_found(self, estimator):
        with pytest.raises(ClusterNotFound):
            estimator.estimate("missing")
