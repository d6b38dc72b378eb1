"""
클러스터 상태 분류

- derive_lifecycle_state: 워커 수 / 존 수로 active, hibernated, unknown 계산
- FleetStatusReporter: 모든 클러스터의 하이버네이션 상태 목록 (읽기 전용)
"""
import logging
from typing import List, Optional

from hibernator.core.errors import ClusterNotFound, GatewayError
from hibernator.models.cluster import ClusterLifecycleState, FleetEntry
from hibernator.services.gateway import PoolGateway
from hibernator.services.state_store import HibernationStateStore
from hibernator.utils.config import HIBERNATED_SIZE_PER_ZONE
from hibernator.utils.helpers import count_ready

logger = logging.getLogger(__name__)


def derive_lifecycle_state(gateway: PoolGateway, cluster: str) -> ClusterLifecycleState:
    """현재 워커 풀 크기와 워커 수로 클러스터 상태 계산

    Raises:
        ClusterNotFound: 클러스터가 없는 경우 (그 외 조회 실패는 unknown)
    """
    try:
        pools = gateway.list_pools(cluster)
        workers = gateway.list_workers(cluster)
    except ClusterNotFound:
        raise
    except GatewayError as e:
        logger.warning(f"Lifecycle query failed for cluster '{cluster}': {e}")
        return ClusterLifecycleState.UNKNOWN

    if not pools:
        return ClusterLifecycleState.UNKNOWN

    zone_count = sum(p.zone_count for p in pools)
    capacity = sum(p.total_workers for p in pools)
    minimal = all(p.size_per_zone <= HIBERNATED_SIZE_PER_ZONE for p in pools)

    if minimal and len(workers) == zone_count:
        return ClusterLifecycleState.HIBERNATED
    if len(workers) == capacity and count_ready(workers) == len(workers):
        return ClusterLifecycleState.ACTIVE
    return ClusterLifecycleState.UNKNOWN


class FleetStatusReporter:
    """Classifies every known cluster as active / hibernated / unknown"""

    def __init__(self, gateway: PoolGateway, store: Optional[HibernationStateStore] = None):
        self.gateway = gateway
        self.store = store

    def list_all(self) -> List[FleetEntry]:
        """클러스터 목록 조회 실패 시 RemoteUnavailable, 개별 클러스터 실패는 unknown"""
        entries = []
        for cluster in self.gateway.list_clusters():
            entries.append(self.describe(cluster))
        return entries

    def describe(self, cluster: str) -> FleetEntry:
        worker_count: Optional[int]
        try:
            worker_count = len(self.gateway.list_workers(cluster))
        except GatewayError as e:
            logger.warning(f"Worker query failed for cluster '{cluster}': {e}")
            worker_count = None

        raw_state = self.gateway.get_cluster_state(cluster)

        if worker_count is None:
            classification = ClusterLifecycleState.UNKNOWN
        elif worker_count == 0:
            classification = ClusterLifecycleState.HIBERNATED
        else:
            classification = ClusterLifecycleState.ACTIVE

        return FleetEntry(
            cluster_name=cluster,
            classification=classification,
            worker_count=worker_count,
            raw_state=raw_state,
            record_set_present=self._has_records(cluster),
        )

    def _has_records(self, cluster: str) -> bool:
        if self.store is None:
            return False
        try:
            return self.store.has_record_set(cluster)
        except (OSError, ValueError) as e:
            logger.warning(f"Record lookup failed for cluster '{cluster}': {e}")
            return False
