"""
하이버네이션 / 웨이크 작업 모델

- HibernationRecord: 풀별 원래 크기 기록
- RecordSet: 기록 파일 읽기 결과 (파싱 실패 항목 포함)
- ActionResult: hibernate / wake 결과 (Success / SuccessWithWarning / Failure)
- OperationState: API 백그라운드 작업 상태
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, computed_field


class HibernationRecord(BaseModel):
    """워커 풀의 원래 크기 기록"""
    cluster_name: str
    pool_name: str
    original_size_per_zone: int = Field(..., ge=1, description="하이버네이션 전 존당 워커 수")
    captured_at: datetime = Field(default_factory=datetime.now)


class MalformedRecord(BaseModel):
    """파싱할 수 없는 기록 줄"""
    line_number: int
    raw: str
    pool_name: Optional[str] = Field(None, description="줄에서 알아낼 수 있는 풀 이름")


class RecordSet(BaseModel):
    """클러스터의 기록 전체"""
    cluster_name: str
    sizes: Dict[str, int] = Field(default_factory=dict)
    malformed: List[MalformedRecord] = Field(default_factory=list)


class ActionStatus(str, Enum):
    SUCCESS = "success"
    SUCCESS_WITH_WARNING = "success_with_warning"
    FAILURE = "failure"


class OperationPhase(str, Enum):
    """상태 머신 단계"""
    ACTIVE = "active"
    CAPTURING = "capturing"
    RESOLVING = "resolving"
    RESIZING = "resizing"
    VERIFYING = "verifying"
    HIBERNATED = "hibernated"
    FAILED = "failed"


class SizeSource(str, Enum):
    """목표 크기의 출처"""
    CAPTURED = "captured"  # 하이버네이션 시 조회한 현재 크기
    RECORD = "record"  # 기록 파일
    CALLER = "caller"  # 호출자가 지정
    DEFAULT = "default"  # 기본값 (존당 2)


class PoolOutcome(BaseModel):
    """풀별 처리 결과"""
    pool_name: str
    target_size_per_zone: int
    previous_size_per_zone: Optional[int] = None
    source: SizeSource = SizeSource.RECORD
    succeeded: bool = False
    error: Optional[str] = None


class ActionResult(BaseModel):
    """hibernate / wake 결과"""
    action: str
    cluster_name: str
    status: ActionStatus = ActionStatus.SUCCESS
    phase: OperationPhase = OperationPhase.ACTIVE
    pools: List[PoolOutcome] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    reason: Optional[str] = None

    @computed_field
    @property
    def failed_pools(self) -> List[str]:
        return [p.pool_name for p in self.pools if not p.succeeded]

    @computed_field
    @property
    def succeeded_pools(self) -> List[str]:
        return [p.pool_name for p in self.pools if p.succeeded]


class OperationStatus(str, Enum):
    RUNNING = "running"
    CANCELLING = "cancelling"
    COMPLETED = "completed"


class OperationState(BaseModel):
    """백그라운드 작업 상태"""
    id: str
    action: str
    cluster_name: str
    status: OperationStatus = OperationStatus.RUNNING
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    result: Optional[ActionResult] = None


class HibernateRequest(BaseModel):
    """하이버네이션 요청"""
    cluster: Optional[str] = Field(None, description="클러스터 이름 (생략 시 자동 해석)")
    force: bool = Field(default=False, description="클러스터가 active 상태가 아니어도 진행")


class WakeRequest(BaseModel):
    """웨이크 요청"""
    cluster: Optional[str] = Field(None, description="클러스터 이름 (생략 시 자동 해석)")
    sizes: Dict[str, int] = Field(
        default_factory=dict,
        description="기록이 없거나 손상된 풀의 존당 워커 수 (기본값 2)",
    )


class CostInfo(BaseModel):
    """하이버네이션 비용 추정"""
    cluster_name: str
    full_workers: Optional[int] = None
    hibernated_workers: Optional[int] = None
    current_workers: Optional[int] = None
    worker_hourly_rate: float
    master_hourly_rate: float
    storage_hourly_rate: float
    full_hourly_cost: Optional[float] = None
    hibernated_hourly_cost: Optional[float] = None
    full_monthly_cost: Optional[float] = None
    hibernated_monthly_cost: Optional[float] = None
    monthly_savings: Optional[float] = None
    savings_percent: Optional[float] = Field(None, description="워커 비용 절감률 (%)")
    notes: List[str] = Field(default_factory=list)
