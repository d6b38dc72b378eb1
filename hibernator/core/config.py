"""
Application configuration settings
"""
import os
from typing import List


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return float(value)


class Settings:
    """Application settings"""

    # App
    APP_TITLE: str = "Cluster Hibernator API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]

    # IBM Cloud 컨트롤 플레인
    IBMCLOUD_API_KEY: str = os.environ.get("IBMCLOUD_API_KEY", "")
    IBMCLOUD_IAM_URL: str = os.environ.get("IBMCLOUD_IAM_URL", "https://iam.cloud.ibm.com")
    IBMCLOUD_CONTAINERS_URL: str = os.environ.get(
        "IBMCLOUD_CONTAINERS_URL", "https://containers.cloud.ibm.com/global"
    )
    IBMCLOUD_REGION: str = os.environ.get("IBMCLOUD_REGION", "")
    IBMCLOUD_RESOURCE_GROUP: str = os.environ.get("IBMCLOUD_RESOURCE_GROUP", "")
    IBMCLOUD_TIMEOUT_SEC: float = _env_float("IBMCLOUD_TIMEOUT_SEC", 30.0)

    # 원래 워커 수 기록 파일 위치 (클러스터별 {cluster}_original_counts.txt)
    STATE_DIR: str = os.environ.get("HIBERNATOR_STATE_DIR", "/tmp")

    # 클러스터 이름 해석 (이름 생략 시)
    DEFAULT_CLUSTER_NAME: str = os.environ.get("HIBERNATOR_CLUSTER_NAME", "")
    TERRAFORM_DIR: str = os.environ.get("HIBERNATOR_TERRAFORM_DIR", ".")

    # 폴링 주기 / 타임아웃 (초)
    HIBERNATE_POLL_INTERVAL_SEC: float = _env_float("HIBERNATE_POLL_INTERVAL_SEC", 60.0)
    HIBERNATE_MAX_WAIT_SEC: float = _env_float("HIBERNATE_MAX_WAIT_SEC", 1800.0)
    WAKE_POLL_INTERVAL_SEC: float = _env_float("WAKE_POLL_INTERVAL_SEC", 120.0)
    WAKE_MAX_WAIT_SEC: float = _env_float("WAKE_MAX_WAIT_SEC", 2700.0)

    # 비용 추정 (USD/hour)
    WORKER_HOURLY_RATE: float = _env_float("WORKER_HOURLY_RATE", 0.50)
    MASTER_HOURLY_RATE: float = _env_float("MASTER_HOURLY_RATE", 0.27)
    STORAGE_HOURLY_RATE: float = _env_float("STORAGE_HOURLY_RATE", 0.10)


settings = Settings()
