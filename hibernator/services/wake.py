"""
WakeOrchestrator
================

Hibernated → Resolving → Resizing → Verifying → Active (어느 단계에서든 Failed)

1. Resolving: 기록에서 원래 크기를 읽는다. 기록이 없거나 손상된 풀은
   호출자가 준 크기 또는 기본값(존당 2)으로 재구성하고 경고로 남긴다.
2. Resizing: 각 풀을 원래 크기로 복원 (풀별 실패는 건너뛰고 계속)
3. Verifying: 모든 워커가 normal이 될 때까지 폴링 (타임아웃은 경고)
4. 리사이즈가 받아들여진 풀과 거부된 풀의 기록은 삭제,
   연결 실패한 풀의 기록만 남겨 다시 웨이크할 때 재시도
"""
import logging
from typing import Dict, List, Mapping, Optional

from hibernator.core.config import settings
from hibernator.core.errors import GatewayError, RecordSetNotFound, ResizeRejected
from hibernator.models.hibernation import (
    ActionResult,
    OperationPhase,
    PoolOutcome,
    RecordSet,
    SizeSource,
)
from hibernator.services.gateway import PoolGateway
from hibernator.services.reconciler import Reconciler, WaitOutcome
from hibernator.services.results import fail, finalize
from hibernator.services.state_store import HibernationStateStore
from hibernator.utils.config import DEFAULT_WAKE_SIZE_PER_ZONE
from hibernator.utils.helpers import count_ready, parse_size

logger = logging.getLogger(__name__)


class WakeOrchestrator:
    """Restores every worker pool of a cluster to its recorded size"""

    def __init__(
        self,
        gateway: PoolGateway,
        store: HibernationStateStore,
        reconciler: Reconciler,
        poll_interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        default_size_per_zone: int = DEFAULT_WAKE_SIZE_PER_ZONE,
    ):
        self.gateway = gateway
        self.store = store
        self.reconciler = reconciler
        self.poll_interval = poll_interval or settings.WAKE_POLL_INTERVAL_SEC
        self.max_wait = max_wait or settings.WAKE_MAX_WAIT_SEC
        self.default_size_per_zone = default_size_per_zone

    def run(self, cluster: str, sizes: Optional[Mapping[str, int]] = None) -> ActionResult:
        """클러스터 웨이크

        Args:
            cluster: 클러스터 이름
            sizes: 기록이 없거나 손상된 풀에 쓸 존당 워커 수. 정상 기록이 우선한다.
        """
        result = ActionResult(
            action="wake",
            cluster_name=cluster,
            phase=OperationPhase.HIBERNATED,
        )
        logger.info(f"Starting wake-up process for cluster: {cluster}")

        # ── Resolving ───────────────────────────────────────────────
        result.phase = OperationPhase.RESOLVING
        try:
            targets = self._resolve(cluster, dict(sizes or {}), result)
        except (GatewayError, OSError) as e:
            return fail(result, e)

        if not targets:
            return fail(result, f"No worker pools to restore for cluster: {cluster}")

        # ── Resizing ────────────────────────────────────────────────
        result.phase = OperationPhase.RESIZING
        retryable = []
        for outcome in targets:
            if self._resize(cluster, outcome):
                retryable.append(outcome.pool_name)
            result.pools.append(outcome)

        self._discard_settled(cluster, result, retryable)

        if not result.succeeded_pools:
            finalize(result)
            result.phase = OperationPhase.FAILED
            return result

        # ── Verifying ───────────────────────────────────────────────
        result.phase = OperationPhase.VERIFYING
        logger.info("Worker pools are being restored to original sizes")
        outcome = self._wait_for_ready(cluster)
        if outcome == WaitOutcome.READY:
            logger.info("Cluster wake-up complete! All workers are ready.")
        elif outcome == WaitOutcome.CANCELLED:
            result.warnings.append(
                f"Wake-up monitoring of cluster '{cluster}' was cancelled; resize already requested"
            )
        else:
            result.warnings.append(
                f"Wake-up of cluster '{cluster}' is taking longer than expected; "
                f"check workers manually"
            )

        result.phase = OperationPhase.ACTIVE
        return finalize(result)

    # ------------------------------------------------------------------

    def _resolve(self, cluster: str, sizes: Dict[str, int], result: ActionResult) -> List[PoolOutcome]:
        try:
            records = self.store.read_all(cluster)
        except RecordSetNotFound:
            result.warnings.append(
                f"No hibernation records for cluster '{cluster}'; "
                f"worker pool sizes reconstructed from caller input or default"
            )
            logger.warning(result.warnings[-1])
            return [
                self._reconstruct(cluster, pool.name, sizes, result)
                for pool in self.gateway.list_pools(cluster)
            ]

        logger.info(f"Restoring worker pools from records of cluster '{cluster}'")
        return self._from_records(cluster, records, sizes, result)

    def _from_records(
        self,
        cluster: str,
        records: RecordSet,
        sizes: Dict[str, int],
        result: ActionResult,
    ) -> List[PoolOutcome]:
        targets = [
            PoolOutcome(pool_name=pool, target_size_per_zone=size, source=SizeSource.RECORD)
            for pool, size in records.sizes.items()
        ]

        for entry in records.malformed:
            if not entry.pool_name:
                result.warnings.append(
                    f"Discarded unreadable hibernation record of cluster '{cluster}' "
                    f"(line {entry.line_number}): {entry.raw!r}"
                )
                continue
            if entry.pool_name in records.sizes or any(t.pool_name == entry.pool_name for t in targets):
                continue
            result.warnings.append(
                f"Invalid worker count {entry.raw!r} for pool '{entry.pool_name}' of cluster '{cluster}'"
            )
            targets.append(self._reconstruct(cluster, entry.pool_name, sizes, result))

        if not targets:
            # 읽을 수 있는 기록이 하나도 없으면 현재 풀 목록으로 재구성
            result.warnings.append(
                f"Hibernation records of cluster '{cluster}' contain no usable entries; "
                f"worker pool sizes reconstructed from caller input or default"
            )
            targets = [
                self._reconstruct(cluster, pool.name, sizes, result)
                for pool in self.gateway.list_pools(cluster)
            ]

        return targets

    def _reconstruct(self, cluster: str, pool: str, sizes: Dict[str, int], result: ActionResult) -> PoolOutcome:
        """기록이 없는 풀의 목표 크기 결정"""
        if pool in sizes:
            size = parse_size(sizes[pool])
            if size is not None and size >= 1:
                return PoolOutcome(pool_name=pool, target_size_per_zone=size, source=SizeSource.CALLER)
            result.warnings.append(
                f"Invalid number {sizes[pool]!r} for pool '{pool}' of cluster '{cluster}', "
                f"using default: {self.default_size_per_zone}"
            )
        else:
            result.warnings.append(
                f"Pool '{pool}' of cluster '{cluster}' restored to default "
                f"{self.default_size_per_zone} workers per zone"
            )
        return PoolOutcome(
            pool_name=pool,
            target_size_per_zone=self.default_size_per_zone,
            source=SizeSource.DEFAULT,
        )

    def _resize(self, cluster: str, outcome: PoolOutcome) -> bool:
        """풀 복원 요청. 다시 시도할 만한 실패면 True"""
        pool, size = outcome.pool_name, outcome.target_size_per_zone
        logger.info(f"Restoring worker pool '{pool}' to {size} workers per zone...")
        try:
            self.gateway.resize_pool(cluster, pool, size)
        except ResizeRejected as e:
            outcome.error = str(e)
            logger.error(f"Failed to restore worker pool: {pool}: {e}")
            return False
        except GatewayError as e:
            outcome.error = str(e)
            logger.error(f"Failed to restore worker pool: {pool}: {e}")
            return True
        outcome.succeeded = True
        logger.info(f"Worker pool '{pool}' restore initiated")
        return False

    def _discard_settled(self, cluster: str, result: ActionResult, retryable: List[str]) -> None:
        """재시도할 풀을 제외한 기록 삭제

        기록은 풀이 하이버네이션 크기일 때만 남아 있어야 한다.
        거부된 풀 (삭제된 풀 등)은 다시 시도해도 성공하지 않으므로 기록을 버린다.
        """
        try:
            if not retryable:
                self.store.clear(cluster)
                return
            for outcome in result.pools:
                if outcome.pool_name not in retryable:
                    self.store.discard_record(cluster, outcome.pool_name)
        except OSError as e:
            result.warnings.append(f"Could not clean up hibernation records of cluster '{cluster}': {e}")
            return

        if retryable:
            logger.warning(
                f"Keeping hibernation records of cluster '{cluster}' for retry: {', '.join(retryable)}"
            )
        for outcome in result.pools:
            if not outcome.succeeded and outcome.pool_name not in retryable:
                result.warnings.append(
                    f"Discarded hibernation record of worker pool '{outcome.pool_name}' "
                    f"in cluster '{cluster}': resize was rejected"
                )

    def _wait_for_ready(self, cluster: str) -> WaitOutcome:
        logger.info("Monitoring wake-up progress...")

        def all_ready() -> bool:
            workers = self.gateway.list_workers(cluster)
            ready, total = count_ready(workers), len(workers)
            if ready > 0 and ready == total:
                return True
            logger.info(f"Workers status: {ready}/{total} ready")
            return False

        return self.reconciler.wait_until(all_ready, self.poll_interval, self.max_wait)
