"""
하이버네이션 API Router

- 전체 클러스터 하이버네이션 상태 조회
- 비용 추정 / 원래 크기 기록 조회
- hibernate / wake 작업 시작 (백그라운드 실행)
- 작업 상태 조회 및 취소
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query, BackgroundTasks

from hibernator.core.dependencies import get_hibernation_service
from hibernator.core.errors import (
    ClusterNotFound,
    ClusterNotResolved,
    HibernationError,
    OperationInProgress,
    PoolNotFound,
    RecordSetNotFound,
    RemoteUnavailable,
)
from hibernator.models.cluster import FleetEntry
from hibernator.models.hibernation import (
    CostInfo,
    HibernateRequest,
    OperationState,
    RecordSet,
    WakeRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/hibernation", tags=["hibernation"])


def _http_error(e: HibernationError) -> HTTPException:
    if isinstance(e, (ClusterNotFound, PoolNotFound, RecordSetNotFound)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ClusterNotResolved):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, OperationInProgress):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, RemoteUnavailable):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


# ============================================
# 상태 조회 API
# ============================================

@router.get("/status", response_model=List[FleetEntry])
def get_fleet_status():
    """모든 클러스터의 하이버네이션 상태"""
    try:
        return get_hibernation_service().status()
    except HibernationError as e:
        raise _http_error(e)


@router.get("/cost", response_model=CostInfo)
def get_cost_info(cluster: Optional[str] = Query(None, description="클러스터 이름 (생략 시 자동 해석)")):
    """하이버네이션 비용 추정"""
    try:
        return get_hibernation_service().cost_info(cluster)
    except HibernationError as e:
        raise _http_error(e)


@router.get("/records/{cluster}", response_model=RecordSet)
def get_records(cluster: str):
    """클러스터의 원래 크기 기록 조회"""
    try:
        return get_hibernation_service().store.read_all(cluster)
    except HibernationError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================
# 작업 API
# ============================================

@router.post("/hibernate", response_model=OperationState, status_code=202)
async def hibernate_cluster(request: HibernateRequest, background_tasks: BackgroundTasks):
    """
    클러스터 하이버네이션 시작

    프로세스:
    1. 모든 워커 풀의 현재 크기 기록
    2. 각 풀을 존당 1개로 축소
    3. 워커 수가 줄어들 때까지 모니터링
    """
    service = get_hibernation_service()
    try:
        op = service.start_operation("hibernate", request.cluster)
    except HibernationError as e:
        raise _http_error(e)

    background_tasks.add_task(service.run_operation, op.id, force=request.force)
    logger.info(f"Hibernation scheduled: {op.cluster_name} ({op.id})")
    return op


@router.post("/wake", response_model=OperationState, status_code=202)
async def wake_cluster(request: WakeRequest, background_tasks: BackgroundTasks):
    """
    클러스터 웨이크 시작

    기록된 원래 크기로 복원. 기록이 없는 풀은 sizes 또는 기본값(존당 2) 사용.
    """
    service = get_hibernation_service()
    try:
        op = service.start_operation("wake", request.cluster)
    except HibernationError as e:
        raise _http_error(e)

    background_tasks.add_task(service.run_operation, op.id, sizes=request.sizes)
    logger.info(f"Wake-up scheduled: {op.cluster_name} ({op.id})")
    return op


@router.get("/operations", response_model=List[OperationState])
async def list_operations():
    """작업 목록 (최신순)"""
    return get_hibernation_service().list_operations()


@router.get("/operations/{operation_id}", response_model=OperationState)
async def get_operation(operation_id: str):
    """작업 상태 조회"""
    op = get_hibernation_service().get_operation(operation_id)
    if op is None:
        raise HTTPException(status_code=404, detail=f"Operation not found: {operation_id}")
    return op


@router.post("/operations/{operation_id}/cancel", response_model=OperationState)
async def cancel_operation(operation_id: str):
    """작업 모니터링 중단 (이미 요청된 리사이즈는 유지)"""
    op = get_hibernation_service().cancel_operation(operation_id)
    if op is None:
        raise HTTPException(status_code=404, detail=f"Operation not found: {operation_id}")
    return op
