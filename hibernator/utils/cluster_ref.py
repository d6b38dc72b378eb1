"""
클러스터 이름 자동 해석

이름을 생략하면 다음 순서로 찾는다:
- HIBERNATOR_CLUSTER_NAME 환경변수
- Terraform 출력값 (terraform output -raw cluster_name, terraform.tfstate 있을 때만)
- 현재 kubeconfig 컨텍스트 (`ibmcloud ks cluster config`가 만든 "<cluster>/<id>" 형식)
"""
import os
import logging
import subprocess
from typing import Optional

from kubernetes import config

from hibernator.core.config import settings
from hibernator.core.errors import ClusterNotResolved

logger = logging.getLogger(__name__)


def cluster_from_terraform(terraform_dir: Optional[str] = None) -> Optional[str]:
    """Terraform 출력값에서 클러스터 이름 조회"""
    terraform_dir = terraform_dir or settings.TERRAFORM_DIR
    if not os.path.isfile(os.path.join(terraform_dir, "terraform.tfstate")):
        return None

    try:
        proc = subprocess.run(
            ["terraform", "output", "-raw", "cluster_name"],
            cwd=terraform_dir,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"terraform output failed: {e}")
        return None

    if proc.returncode != 0:
        logger.debug(f"terraform output returned {proc.returncode}: {proc.stderr.strip()}")
        return None

    name = proc.stdout.strip()
    return name or None


def cluster_from_kubeconfig() -> Optional[str]:
    """현재 kubeconfig 컨텍스트에서 클러스터 이름 조회"""
    try:
        _, active = config.list_kube_config_contexts()
    except (config.ConfigException, OSError) as e:
        logger.debug(f"No kubeconfig context available: {e}")
        return None

    if not active:
        return None

    context = active.get("context") or {}
    # IBM Cloud 컨텍스트 이름: <cluster>/<cluster-id>[/admin]
    name = (context.get("cluster") or active.get("name") or "").split("/")[0].strip()
    return name or None


def resolve_cluster_name(explicit: Optional[str] = None) -> str:
    """클러스터 이름 결정

    Raises:
        ClusterNotResolved: 어떤 방법으로도 이름을 찾지 못한 경우
    """
    if explicit is not None:
        name = explicit.strip()
        if not name:
            raise ClusterNotResolved("cluster name is empty")
        return name

    if settings.DEFAULT_CLUSTER_NAME:
        return settings.DEFAULT_CLUSTER_NAME

    name = cluster_from_terraform()
    if name:
        logger.info(f"Cluster name resolved from Terraform output: {name}")
        return name

    name = cluster_from_kubeconfig()
    if name:
        logger.info(f"Cluster name resolved from kubeconfig context: {name}")
        return name

    raise ClusterNotResolved(
        "pass a cluster name, set HIBERNATOR_CLUSTER_NAME, "
        "or run from a Terraform directory with a cluster_name output"
    )
