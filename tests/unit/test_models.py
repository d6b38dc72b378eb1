"""
Unit tests for Pydantic models
"""
import pytest
from pydantic import ValidationError

from hibernator.models.cluster import WorkerPool
from hibernator.models.hibernation import (
    ActionResult,
    ActionStatus,
    HibernationRecord,
    PoolOutcome,
    WakeRequest,
)


class TestClusterModels:
    """Tests for cluster models"""

    def test_worker_pool_total(self):
        pool = WorkerPool(name="default", size_per_zone=3, zone_count=3)
        assert pool.total_workers == 9

    def test_worker_pool_defaults(self):
        assert WorkerPool(name="default", size_per_zone=2).zone_count == 1

    def test_worker_pool_negative_size(self):
        with pytest.raises(ValidationError):
            WorkerPool(name="default", size_per_zone=-1)

    def test_worker_pool_empty_name(self):
        with pytest.raises(ValidationError):
            WorkerPool(name="", size_per_zone=1)


class TestHibernationModels:
    """Tests for hibernation models"""

    def test_record_requires_positive_size(self):
        with pytest.raises(ValidationError):
            HibernationRecord(cluster_name="demo", pool_name="default", original_size_per_zone=0)

    def test_action_result_defaults(self):
        result = ActionResult(action="hibernate", cluster_name="demo")
        assert result.status == ActionStatus.SUCCESS
        assert result.pools == []
        assert result.warnings == []

    def test_action_result_pool_split(self):
        result = ActionResult(
            action="wake",
            cluster_name="demo",
            pools=[
                PoolOutcome(pool_name="default", target_size_per_zone=3, succeeded=True),
                PoolOutcome(pool_name="gpu", target_size_per_zone=2, error="boom"),
            ],
        )
        assert result.succeeded_pools == ["default"]
        assert result.failed_pools == ["gpu"]

        data = result.model_dump()
        assert data["failed_pools"] == ["gpu"]

    def test_wake_request_defaults(self):
        request = WakeRequest()
        assert request.cluster is None
        assert request.sizes == {}
