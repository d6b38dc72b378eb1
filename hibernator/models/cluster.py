"""
Cluster related Pydantic models
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class WorkerState(str, Enum):
    """워커 상태 (준비 여부 집계용)"""
    NORMAL = "normal"
    OTHER = "other"


class ClusterLifecycleState(str, Enum):
    """워커 수와 존 수로부터 계산되는 클러스터 상태 (저장하지 않음)"""
    ACTIVE = "active"
    HIBERNATED = "hibernated"
    UNKNOWN = "unknown"


class WorkerPool(BaseModel):
    """워커 풀 정보"""
    name: str = Field(..., min_length=1, description="워커 풀 이름")
    size_per_zone: int = Field(..., ge=0, description="존당 워커 수")
    zone_count: int = Field(default=1, ge=1, description="존 수")

    @property
    def total_workers(self) -> int:
        return self.size_per_zone * self.zone_count


class Worker(BaseModel):
    """워커 노드 정보"""
    id: str = ""
    state: WorkerState = WorkerState.OTHER
    pool_name: Optional[str] = None


class FleetEntry(BaseModel):
    """클러스터별 하이버네이션 상태"""
    cluster_name: str
    classification: ClusterLifecycleState
    worker_count: Optional[int] = Field(None, description="워커 수 (조회 실패 시 None)")
    raw_state: str = Field(default="unknown", description="컨트롤 플레인이 보고한 상태 문자열")
    record_set_present: bool = Field(default=False, description="원래 크기 기록 존재 여부")
