"""
전역 상수
"""

# 플랫폼 제약: 클러스터는 존당 최소 1개 워커 필요 (전체 최소 2개)
HIBERNATED_SIZE_PER_ZONE = 1

# 기록이 없거나 손상된 풀을 깨울 때 사용하는 기본 존당 워커 수
DEFAULT_WAKE_SIZE_PER_ZONE = 2

# 컨트롤 플레인이 준비된 워커에 보고하는 상태
WORKER_READY_STATE = "normal"
UNKNOWN_STATE = "unknown"

# 기록 파일 이름: {cluster}_original_counts.txt
RECORD_FILE_SUFFIX = "_original_counts.txt"
LOCK_FILE_SUFFIX = "_original_counts.lock"

# 메모리에 보관하는 완료된 백그라운드 작업 수 (오래된 것부터 삭제)
MAX_COMPLETED_OPERATIONS = 100

# 비용 계산
HOURS_PER_MONTH = 730

COST_NOTES = [
    "Worker nodes are reduced to the minimum of 1 per zone",
    "The cluster master keeps running (and billing) during hibernation",
    "Persistent volume storage keeps billing during hibernation",
    "The platform requires at least 2 workers in total (1 per zone)",
    "For maximum savings over weekends or extended periods, destroy the cluster with Terraform instead",
]
