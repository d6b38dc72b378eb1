"""
ActionResult 상태 결정 헬퍼
"""
import logging

from hibernator.models.hibernation import ActionResult, ActionStatus, OperationPhase

logger = logging.getLogger(__name__)


def fail(result: ActionResult, reason) -> ActionResult:
    """작업 전체 중단"""
    result.phase = OperationPhase.FAILED
    result.status = ActionStatus.FAILURE
    result.reason = str(reason)
    logger.error(f"{result.action} of cluster '{result.cluster_name}' failed: {result.reason}")
    return result


def finalize(result: ActionResult) -> ActionResult:
    """풀별 결과와 경고로 최종 상태 결정"""
    failed = result.failed_pools
    if failed:
        result.status = ActionStatus.FAILURE
        result.reason = (
            f"{result.action} of cluster '{result.cluster_name}' failed for worker pools: "
            + ", ".join(failed)
        )
        logger.error(result.reason)
    elif result.warnings:
        result.status = ActionStatus.SUCCESS_WITH_WARNING
        result.reason = "; ".join(result.warnings)
    else:
        result.status = ActionStatus.SUCCESS
        result.reason = None
    return result
