"""
하이버네이션 오류 분류

- GatewayError: 원격 컨트롤 플레인 호출 실패 (RemoteUnavailable, ClusterNotFound, ...)
- StateStoreError: 원래 크기 기록 저장소 오류 (DuplicateRecord, RecordSetNotFound)
- AlreadyHibernating / ClusterNotResolved: 작업 단위 오류

메시지에는 항상 클러스터와 워커 풀 이름이 포함된다.
"""
from typing import Optional


class HibernationError(Exception):
    """Base class for every error raised by the hibernator"""

    def __init__(self, message: str, cluster: Optional[str] = None, pool: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cluster = cluster
        self.pool = pool

    def __str__(self) -> str:
        return self.message


class GatewayError(HibernationError):
    """컨트롤 플레인 호출 실패"""


class RemoteUnavailable(GatewayError):
    """컨트롤 플레인에 연결할 수 없음 (일시적 오류)"""

    def __init__(self, cluster: Optional[str] = None, pool: Optional[str] = None, detail: str = ""):
        target = f"cluster '{cluster}'" if cluster else "control plane"
        if pool:
            target = f"worker pool '{pool}' of {target}"
        message = f"Control plane unavailable for {target}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, cluster=cluster, pool=pool)


class ClusterNotFound(GatewayError):
    def __init__(self, cluster: str):
        super().__init__(f"Cluster not found: {cluster}", cluster=cluster)


class PoolNotFound(GatewayError):
    def __init__(self, cluster: str, pool: str):
        super().__init__(
            f"Worker pool '{pool}' not found in cluster '{cluster}'",
            cluster=cluster,
            pool=pool,
        )


class ResizeRejected(GatewayError):
    """리사이즈 요청 거부 (잘못된 크기 등)"""

    def __init__(self, cluster: str, pool: str, size_per_zone: int, detail: str = ""):
        message = (
            f"Resize of worker pool '{pool}' in cluster '{cluster}' "
            f"to {size_per_zone} per zone rejected"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, cluster=cluster, pool=pool)
        self.size_per_zone = size_per_zone


class StateStoreError(HibernationError):
    """원래 크기 기록 저장소 오류"""


class DuplicateRecord(StateStoreError):
    def __init__(self, cluster: str, pool: str):
        super().__init__(
            f"Hibernation record for worker pool '{pool}' of cluster '{cluster}' already exists",
            cluster=cluster,
            pool=pool,
        )


class RecordSetNotFound(StateStoreError):
    def __init__(self, cluster: str):
        super().__init__(f"No hibernation records for cluster '{cluster}'", cluster=cluster)


class AlreadyHibernating(HibernationError):
    def __init__(self, cluster: str, pool: Optional[str] = None):
        message = f"Cluster '{cluster}' is already hibernating"
        if pool:
            message = f"{message} (record exists for worker pool '{pool}')"
        super().__init__(message, cluster=cluster, pool=pool)


class ClusterNotResolved(HibernationError):
    def __init__(self, detail: str = ""):
        message = "Could not resolve a cluster name"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class OperationInProgress(HibernationError):
    def __init__(self, cluster: str, operation_id: str):
        super().__init__(
            f"Operation {operation_id} is already running for cluster '{cluster}'",
            cluster=cluster,
        )
        self.operation_id = operation_id
