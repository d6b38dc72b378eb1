"""
HibernationOrchestrator
=======================

Active → Capturing → Resizing → Verifying → Hibernated (어느 단계에서든 Failed)

1. Capturing: 모든 워커 풀의 현재 크기를 리사이즈 전에 기록
   (조회가 일시적으로 실패한 풀은 실패로 집계하고 나머지는 계속)
2. Resizing: 각 풀을 존당 1개로 축소 (풀별 실패는 집계 후 계속)
3. Verifying: normal 워커 수가 기대치 이하가 될 때까지 폴링 (타임아웃은 경고)
"""
import logging
from typing import Callable, List, Optional

from hibernator.core.config import settings
from hibernator.core.errors import (
    AlreadyHibernating,
    ClusterNotFound,
    DuplicateRecord,
    GatewayError,
    RemoteUnavailable,
    ResizeRejected,
    StateStoreError,
)
from hibernator.models.cluster import ClusterLifecycleState, WorkerPool
from hibernator.models.hibernation import (
    ActionResult,
    ActionStatus,
    OperationPhase,
    PoolOutcome,
    SizeSource,
)
from hibernator.services.fleet import derive_lifecycle_state
from hibernator.services.gateway import PoolGateway
from hibernator.services.reconciler import Reconciler, WaitOutcome
from hibernator.services.results import fail, finalize
from hibernator.services.state_store import HibernationStateStore
from hibernator.utils.config import HIBERNATED_SIZE_PER_ZONE
from hibernator.utils.helpers import count_ready

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[ClusterLifecycleState, str], bool]


class HibernationOrchestrator:
    """Scales every worker pool of a cluster down to one worker per zone"""

    def __init__(
        self,
        gateway: PoolGateway,
        store: HibernationStateStore,
        reconciler: Reconciler,
        poll_interval: Optional[float] = None,
        max_wait: Optional[float] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.reconciler = reconciler
        self.poll_interval = poll_interval or settings.HIBERNATE_POLL_INTERVAL_SEC
        self.max_wait = max_wait or settings.HIBERNATE_MAX_WAIT_SEC

    def run(self, cluster: str, confirm: Optional[ConfirmCallback] = None) -> ActionResult:
        """클러스터 하이버네이션

        Args:
            cluster: 클러스터 이름
            confirm: 클러스터가 active가 아닐 때 진행 여부를 묻는 콜백.
                없거나 False를 반환하면 아무것도 바꾸지 않고 끝낸다.
        """
        result = ActionResult(action="hibernate", cluster_name=cluster)
        logger.info(f"Starting hibernation process for cluster: {cluster}")

        # ── Capturing ───────────────────────────────────────────────
        result.phase = OperationPhase.CAPTURING
        if self.store.has_record_set(cluster):
            return fail(result, AlreadyHibernating(cluster))

        try:
            if not self._confirm_state(result, confirm):
                return result
        except ClusterNotFound as e:
            return fail(result, e)

        try:
            pools = self.gateway.list_pools(cluster)
        except GatewayError as e:
            return fail(result, e)

        if not pools:
            return fail(result, f"No worker pools found for cluster: {cluster}")

        logger.info(f"Found worker pools: {' '.join(p.name for p in pools)}")

        captured: List[WorkerPool] = []
        unreachable: List[WorkerPool] = []
        try:
            for pool in pools:
                try:
                    current = self.gateway.get_pool(cluster, pool.name)
                except RemoteUnavailable as e:
                    # 이 풀만 건너뛰고 나머지는 계속 하이버네이션
                    logger.error(f"Could not read worker pool: {pool.name}: {e}")
                    result.pools.append(PoolOutcome(
                        pool_name=pool.name,
                        target_size_per_zone=HIBERNATED_SIZE_PER_ZONE,
                        previous_size_per_zone=pool.size_per_zone,
                        source=SizeSource.CAPTURED,
                        error=str(e),
                    ))
                    unreachable.append(pool)
                    continue
                if current.size_per_zone < HIBERNATED_SIZE_PER_ZONE:
                    result.warnings.append(
                        f"Worker pool '{current.name}' has no workers, skipped"
                    )
                    continue
                self.store.append_record(cluster, current.name, current.size_per_zone)
                captured.append(current)
        except DuplicateRecord as e:
            self._rollback(cluster, captured)
            return fail(result, AlreadyHibernating(cluster, e.pool))
        except (GatewayError, StateStoreError, OSError) as e:
            self._rollback(cluster, captured)
            return fail(result, e)

        if not captured:
            if result.failed_pools:
                finalize(result)
                result.phase = OperationPhase.FAILED
                return result
            result.phase = OperationPhase.ACTIVE
            result.status = ActionStatus.SUCCESS_WITH_WARNING
            result.reason = f"Nothing to hibernate in cluster '{cluster}'"
            return result

        # ── Resizing ────────────────────────────────────────────────
        result.phase = OperationPhase.RESIZING
        logger.info(
            f"Hibernation will scale down to minimum viable size "
            f"({HIBERNATED_SIZE_PER_ZONE} worker per zone)"
        )
        for pool in captured:
            result.pools.append(self._resize(cluster, pool))

        if not result.succeeded_pools:
            finalize(result)
            result.phase = OperationPhase.FAILED
            return result

        # ── Verifying ───────────────────────────────────────────────
        result.phase = OperationPhase.VERIFYING
        expected = self._expected_workers(captured, unreachable, result)
        outcome = self._wait_for_scale_down(cluster, expected)
        if outcome == WaitOutcome.READY:
            logger.info(f"Cluster hibernation complete: {cluster}")
        elif outcome == WaitOutcome.CANCELLED:
            result.warnings.append(
                f"Hibernation monitoring of cluster '{cluster}' was cancelled; resize already requested"
            )
        else:
            result.warnings.append(
                f"Hibernation of cluster '{cluster}' is taking longer than expected; "
                f"check workers manually"
            )

        result.phase = OperationPhase.HIBERNATED
        return finalize(result)

    def _confirm_state(self, result: ActionResult, confirm: Optional[ConfirmCallback]) -> bool:
        cluster = result.cluster_name
        state = derive_lifecycle_state(self.gateway, cluster)
        raw_state = self.gateway.get_cluster_state(cluster)
        logger.info(f"Current cluster state: {state.value} (raw: {raw_state})")

        if state == ClusterLifecycleState.ACTIVE:
            return True

        warning = f"Cluster '{cluster}' is not active (lifecycle: {state.value}, state: {raw_state})"
        logger.warning(warning)
        result.warnings.append(warning)

        if confirm is not None and confirm(state, raw_state):
            return True

        result.phase = OperationPhase.ACTIVE
        result.status = ActionStatus.SUCCESS_WITH_WARNING
        result.reason = f"Hibernation of cluster '{cluster}' cancelled: {warning}"
        logger.info("Hibernation cancelled")
        return False

    def _rollback(self, cluster: str, captured: List[WorkerPool]) -> None:
        """이번 실행에서 기록한 풀만 되돌림"""
        for pool in captured:
            try:
                self.store.discard_record(cluster, pool.name)
            except OSError as e:
                logger.error(f"Could not discard record {cluster}/{pool.name}: {e}")

    def _resize(self, cluster: str, pool: WorkerPool) -> PoolOutcome:
        outcome = PoolOutcome(
            pool_name=pool.name,
            target_size_per_zone=HIBERNATED_SIZE_PER_ZONE,
            previous_size_per_zone=pool.size_per_zone,
            source=SizeSource.CAPTURED,
        )
        logger.info(f"Resizing worker pool '{pool.name}' to {HIBERNATED_SIZE_PER_ZONE} worker per zone...")
        try:
            self.gateway.resize_pool(cluster, pool.name, HIBERNATED_SIZE_PER_ZONE)
        except ResizeRejected as e:
            # 풀 크기가 바뀌지 않았으므로 기록도 남기지 않음
            outcome.error = str(e)
            logger.error(f"Failed to resize worker pool: {pool.name}: {e}")
            self._rollback(cluster, [pool])
            return outcome
        except GatewayError as e:
            # 적용 여부를 알 수 없으므로 원래 크기 기록 유지
            outcome.error = str(e)
            logger.error(f"Failed to resize worker pool: {pool.name}: {e}")
            return outcome

        outcome.succeeded = True
        logger.info(
            f"Worker pool '{pool.name}' resize initiated "
            f"(was {pool.size_per_zone} workers per zone)"
        )
        return outcome

    @staticmethod
    def _expected_workers(
        captured: List[WorkerPool],
        unreachable: List[WorkerPool],
        result: ActionResult,
    ) -> int:
        succeeded = set(result.succeeded_pools)
        resized = sum(
            p.zone_count * HIBERNATED_SIZE_PER_ZONE if p.name in succeeded else p.total_workers
            for p in captured
        )
        return resized + sum(p.total_workers for p in unreachable)

    def _wait_for_scale_down(self, cluster: str, expected: int) -> WaitOutcome:
        logger.info("Monitoring hibernation progress...")

        def scaled_down() -> bool:
            ready = count_ready(self.gateway.list_workers(cluster))
            if ready > expected:
                logger.info(f"Still scaling down workers... ({ready} workers remaining)")
                return False
            logger.info(f"Scaled down to minimum workers ({ready})")
            return True

        return self.reconciler.wait_until(scaled_down, self.poll_interval, self.max_wait)
