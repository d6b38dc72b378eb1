"""
하이버네이션 비용 추정

- 전체 크기: 기록이 있으면 원래 크기, 없으면 현재 풀 크기
- 하이버네이션 크기: 풀당 존 수 (존당 1개)
- 마스터와 스토리지는 하이버네이션 중에도 과금
"""
import logging
from typing import Dict, Optional

from hibernator.core.config import settings
from hibernator.core.errors import GatewayError, RecordSetNotFound
from hibernator.models.hibernation import CostInfo
from hibernator.services.gateway import PoolGateway
from hibernator.services.state_store import HibernationStateStore
from hibernator.utils.config import COST_NOTES, HIBERNATED_SIZE_PER_ZONE, HOURS_PER_MONTH
from hibernator.utils.helpers import format_cost

logger = logging.getLogger(__name__)


class CostEstimator:
    def __init__(
        self,
        gateway: PoolGateway,
        store: HibernationStateStore,
        worker_hourly_rate: Optional[float] = None,
        master_hourly_rate: Optional[float] = None,
        storage_hourly_rate: Optional[float] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.worker_hourly_rate = (
            settings.WORKER_HOURLY_RATE if worker_hourly_rate is None else worker_hourly_rate
        )
        self.master_hourly_rate = (
            settings.MASTER_HOURLY_RATE if master_hourly_rate is None else master_hourly_rate
        )
        self.storage_hourly_rate = (
            settings.STORAGE_HOURLY_RATE if storage_hourly_rate is None else storage_hourly_rate
        )

    def estimate(self, cluster: str) -> CostInfo:
        """클러스터 비용 추정

        Raises:
            ClusterNotFound, RemoteUnavailable
        """
        info = CostInfo(
            cluster_name=cluster,
            worker_hourly_rate=self.worker_hourly_rate,
            master_hourly_rate=self.master_hourly_rate,
            storage_hourly_rate=self.storage_hourly_rate,
            notes=list(COST_NOTES),
        )

        pools = self.gateway.list_pools(cluster)
        recorded = self._recorded_sizes(cluster)

        full_workers = 0
        hibernated_workers = 0
        for pool in pools:
            size = recorded.get(pool.name, pool.size_per_zone)
            full_workers += size * pool.zone_count
            hibernated_workers += min(size, HIBERNATED_SIZE_PER_ZONE) * pool.zone_count

        try:
            info.current_workers = len(self.gateway.list_workers(cluster))
        except GatewayError as e:
            logger.warning(f"Worker query failed for cluster '{cluster}': {e}")

        fixed = self.master_hourly_rate + self.storage_hourly_rate
        full_hourly = full_workers * self.worker_hourly_rate + fixed
        hibernated_hourly = hibernated_workers * self.worker_hourly_rate + fixed

        info.full_workers = full_workers
        info.hibernated_workers = hibernated_workers
        info.full_hourly_cost = round(full_hourly, 4)
        info.hibernated_hourly_cost = round(hibernated_hourly, 4)
        info.full_monthly_cost = round(full_hourly * HOURS_PER_MONTH, 2)
        info.hibernated_monthly_cost = round(hibernated_hourly * HOURS_PER_MONTH, 2)
        info.monthly_savings = round((full_hourly - hibernated_hourly) * HOURS_PER_MONTH, 2)
        if full_workers:
            info.savings_percent = round(100.0 * (full_workers - hibernated_workers) / full_workers, 1)
        info.notes.append(
            f"Estimated savings while hibernated: {format_cost(info.monthly_savings)} per month"
        )
        return info

    def _recorded_sizes(self, cluster: str) -> Dict[str, int]:
        try:
            return self.store.read_all(cluster).sizes
        except RecordSetNotFound:
            return {}
