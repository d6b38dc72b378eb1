"""
호출자용 동작 (hibernate / wake / status / cost)

- 클러스터 이름 생략 시 자동 해석 (utils.cluster_ref)
- 실행마다 새 Reconciler를 만들어 작업 ID로 취소할 수 있다
- 같은 클러스터에 대한 작업은 동시에 하나만 실행
"""
import uuid
import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional

from hibernator.core.errors import OperationInProgress
from hibernator.models.cluster import FleetEntry
from hibernator.models.hibernation import (
    ActionResult,
    CostInfo,
    OperationState,
    OperationStatus,
)
from hibernator.services.cost import CostEstimator
from hibernator.services.fleet import FleetStatusReporter
from hibernator.services.gateway import PoolGateway
from hibernator.services.hibernation import ConfirmCallback, HibernationOrchestrator
from hibernator.services.reconciler import Reconciler
from hibernator.services.results import fail
from hibernator.services.state_store import HibernationStateStore
from hibernator.services.wake import WakeOrchestrator
from hibernator.utils.cluster_ref import resolve_cluster_name
from hibernator.utils.config import MAX_COMPLETED_OPERATIONS

logger = logging.getLogger(__name__)

ReconcilerFactory = Callable[[threading.Event], Reconciler]


def _always_confirm(state, raw_state) -> bool:
    return True


class HibernationService:
    """Caller-facing actions over a gateway and a record store"""

    def __init__(
        self,
        gateway: PoolGateway,
        store: HibernationStateStore,
        reconciler_factory: Optional[ReconcilerFactory] = None,
        hibernate_poll_interval: Optional[float] = None,
        hibernate_max_wait: Optional[float] = None,
        wake_poll_interval: Optional[float] = None,
        wake_max_wait: Optional[float] = None,
        max_completed_operations: int = MAX_COMPLETED_OPERATIONS,
    ):
        self.gateway = gateway
        self.store = store
        self._reconciler_factory = reconciler_factory or (lambda event: Reconciler(cancel_event=event))
        self._hibernate_timing = (hibernate_poll_interval, hibernate_max_wait)
        self._wake_timing = (wake_poll_interval, wake_max_wait)
        self._max_completed = max_completed_operations

        self._lock = threading.Lock()
        self._operations: Dict[str, OperationState] = {}
        self._cancel_events: Dict[str, threading.Event] = {}

    def resolve(self, cluster: Optional[str] = None) -> str:
        return resolve_cluster_name(cluster)

    # ------------------------------------------------------------------
    # 동작
    # ------------------------------------------------------------------

    def hibernate(
        self,
        cluster: Optional[str] = None,
        force: bool = False,
        confirm: Optional[ConfirmCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ActionResult:
        """클러스터 하이버네이션 (force=True면 active가 아니어도 진행)"""
        name = self.resolve(cluster)
        if confirm is None and force:
            confirm = _always_confirm
        orchestrator = HibernationOrchestrator(
            self.gateway,
            self.store,
            self._reconciler_factory(cancel_event or threading.Event()),
            *self._hibernate_timing,
        )
        return orchestrator.run(name, confirm=confirm)

    def wake(
        self,
        cluster: Optional[str] = None,
        sizes: Optional[Mapping[str, int]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ActionResult:
        """클러스터 웨이크"""
        name = self.resolve(cluster)
        orchestrator = WakeOrchestrator(
            self.gateway,
            self.store,
            self._reconciler_factory(cancel_event or threading.Event()),
            *self._wake_timing,
        )
        return orchestrator.run(name, sizes=sizes)

    def status(self) -> List[FleetEntry]:
        """모든 클러스터의 하이버네이션 상태"""
        return FleetStatusReporter(self.gateway, self.store).list_all()

    def cost_info(self, cluster: Optional[str] = None) -> CostInfo:
        """하이버네이션 비용 추정"""
        return CostEstimator(self.gateway, self.store).estimate(self.resolve(cluster))

    # ------------------------------------------------------------------
    # 백그라운드 작업
    # ------------------------------------------------------------------

    def start_operation(self, action: str, cluster: Optional[str] = None) -> OperationState:
        """작업 등록 (실행은 run_operation)

        Raises:
            ClusterNotResolved, OperationInProgress
        """
        if action not in ("hibernate", "wake"):
            raise ValueError(f"Unknown action: {action}")

        name = self.resolve(cluster)
        with self._lock:
            for op in self._operations.values():
                if op.cluster_name == name and op.status != OperationStatus.COMPLETED:
                    raise OperationInProgress(name, op.id)

            op = OperationState(id=uuid.uuid4().hex[:12], action=action, cluster_name=name)
            self._operations[op.id] = op
            self._cancel_events[op.id] = threading.Event()

        logger.info(f"Operation {op.id} registered: {action} {name}")
        return op.model_copy()

    def run_operation(
        self,
        operation_id: str,
        force: bool = False,
        sizes: Optional[Mapping[str, int]] = None,
    ) -> Optional[ActionResult]:
        with self._lock:
            op = self._operations.get(operation_id)
            event = self._cancel_events.get(operation_id)
        if op is None or event is None:
            logger.error(f"Unknown operation: {operation_id}")
            return None

        try:
            if op.action == "hibernate":
                result = self.hibernate(op.cluster_name, force=force, cancel_event=event)
            else:
                result = self.wake(op.cluster_name, sizes=sizes, cancel_event=event)
        except Exception as e:
            logger.exception(f"Operation {operation_id} crashed: {e}")
            result = fail(ActionResult(action=op.action, cluster_name=op.cluster_name), e)

        with self._lock:
            op.result = result
            op.status = OperationStatus.COMPLETED
            op.finished_at = datetime.now()
            self._cancel_events.pop(operation_id, None)
            self._prune_completed()

        logger.info(f"Operation {operation_id} finished: {result.status.value}")
        return result

    def _prune_completed(self) -> None:
        """완료된 작업이 상한을 넘으면 가장 먼저 끝난 것부터 삭제 (lock 보유 상태에서 호출)"""
        completed = [op for op in self._operations.values() if op.status == OperationStatus.COMPLETED]
        excess = len(completed) - self._max_completed
        if excess <= 0:
            return
        completed.sort(key=lambda op: op.finished_at)
        for op in completed[:excess]:
            del self._operations[op.id]
        logger.debug(f"Pruned {excess} completed operations")

    def get_operation(self, operation_id: str) -> Optional[OperationState]:
        with self._lock:
            op = self._operations.get(operation_id)
            return op.model_copy() if op else None

    def list_operations(self) -> List[OperationState]:
        with self._lock:
            ops = [op.model_copy() for op in self._operations.values()]
        ops.sort(key=lambda op: op.started_at, reverse=True)
        return ops

    def cancel_operation(self, operation_id: str) -> Optional[OperationState]:
        """폴링 대기 중단 요청 (이미 요청된 리사이즈는 되돌리지 않음)"""
        with self._lock:
            op = self._operations.get(operation_id)
            if op is None:
                return None
            event = self._cancel_events.get(operation_id)
            if event is not None and op.status == OperationStatus.RUNNING:
                event.set()
                op.status = OperationStatus.CANCELLING
                logger.info(f"Operation {operation_id} cancellation requested")
            return op.model_copy()
