"""
컨트롤 플레인 게이트웨이

워커 풀 조회/리사이즈, 워커 상태 조회를 감싼다.
재시도는 하지 않는다 (리사이즈 적용은 원격 시스템이 비동기로 처리).

IBMCloudPoolGateway: IBM Cloud Kubernetes Service REST API (IAM API key 인증)
"""
import time
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from hibernator.core.config import settings
from hibernator.core.errors import (
    GatewayError,
    RemoteUnavailable,
    ClusterNotFound,
    PoolNotFound,
    ResizeRejected,
)
from hibernator.models.cluster import WorkerPool, Worker, WorkerState
from hibernator.utils.config import WORKER_READY_STATE, UNKNOWN_STATE

logger = logging.getLogger(__name__)

IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
TOKEN_REFRESH_MARGIN_SEC = 60


class PoolGateway(ABC):
    """Remote control-plane operations used by the orchestrators"""

    @abstractmethod
    def list_clusters(self) -> List[str]:
        """모든 클러스터 이름"""

    @abstractmethod
    def list_pools(self, cluster: str) -> List[WorkerPool]:
        """클러스터의 워커 풀 목록

        Raises:
            RemoteUnavailable, ClusterNotFound
        """

    @abstractmethod
    def get_pool(self, cluster: str, pool: str) -> WorkerPool:
        """워커 풀 단건 조회

        Raises:
            RemoteUnavailable, ClusterNotFound, PoolNotFound
        """

    @abstractmethod
    def resize_pool(self, cluster: str, pool: str, size_per_zone: int) -> None:
        """존당 워커 수 변경 요청 (적용은 비동기)

        Raises:
            ResizeRejected, RemoteUnavailable
        """

    @abstractmethod
    def list_workers(self, cluster: str) -> List[Worker]:
        """클러스터의 워커 목록"""

    @abstractmethod
    def get_cluster_state(self, cluster: str) -> str:
        """클러스터 상태 문자열. 조회 실패 시 "unknown" (예외 없음)"""


def parse_pool(data: Dict[str, Any]) -> WorkerPool:
    """워커 풀 응답 → WorkerPool

    v1/v2 API 필드 이름이 다르므로 둘 다 허용한다.
    """
    name = data.get("poolName") or data.get("name") or ""
    size = data.get("workerCount")
    if size is None:
        size = data.get("sizePerZone", data.get("size", 0))
    zones = data.get("zones") or []
    return WorkerPool(name=name, size_per_zone=int(size or 0), zone_count=max(len(zones), 1))


def parse_worker(data: Dict[str, Any]) -> Worker:
    """워커 응답 → Worker"""
    state = data.get("state")
    if state is None:
        state = (data.get("health") or {}).get("state")
    return Worker(
        id=data.get("id", ""),
        state=WorkerState.NORMAL if state == WORKER_READY_STATE else WorkerState.OTHER,
        pool_name=data.get("poolName") or data.get("poolname"),
    )


class IBMCloudPoolGateway(PoolGateway):
    """IBM Cloud Kubernetes Service API 게이트웨이

    Example:
        >>> gateway = IBMCloudPoolGateway(api_key="...")
        >>> gateway.list_pools("demo")
        [WorkerPool(name='default', size_per_zone=3, zone_count=3)]
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        iam_url: Optional[str] = None,
        region: Optional[str] = None,
        resource_group: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock=time.monotonic,
    ):
        self.api_key = api_key if api_key is not None else settings.IBMCLOUD_API_KEY
        self.base_url = (base_url or settings.IBMCLOUD_CONTAINERS_URL).rstrip("/")
        self.iam_url = (iam_url or settings.IBMCLOUD_IAM_URL).rstrip("/")
        self.region = region if region is not None else settings.IBMCLOUD_REGION
        self.resource_group = (
            resource_group if resource_group is not None else settings.IBMCLOUD_RESOURCE_GROUP
        )
        self._client = httpx.Client(
            timeout=timeout or settings.IBMCLOUD_TIMEOUT_SEC,
            transport=transport,
        )
        self._clock = clock
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # 인증
    # ------------------------------------------------------------------

    def _get_token(self) -> str:
        if self._token and self._clock() < self._token_expires_at:
            return self._token

        if not self.api_key:
            raise RemoteUnavailable(detail="IBMCLOUD_API_KEY is not set")

        try:
            resp = self._client.post(
                f"{self.iam_url}/identity/token",
                data={"grant_type": IAM_GRANT_TYPE, "apikey": self.api_key},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise RemoteUnavailable(detail=f"IAM token request failed: {e}") from e

        if resp.status_code != 200:
            raise RemoteUnavailable(detail=f"IAM token request returned {resp.status_code}")

        body = resp.json()
        if not body.get("access_token"):
            raise RemoteUnavailable(detail="IAM token response has no access_token")
        self._token = body["access_token"]
        expires_in = float(body.get("expires_in", 3600))
        self._token_expires_at = self._clock() + max(expires_in - TOKEN_REFRESH_MARGIN_SEC, 0)
        logger.debug("IAM token refreshed")
        return self._token

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._get_token()}",
            "Accept": "application/json",
        }
        if self.region:
            headers["X-Region"] = self.region
        if self.resource_group:
            headers["X-Auth-Resource-Group"] = self.resource_group
        return headers

    # ------------------------------------------------------------------
    # 요청 / 오류 변환
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        cluster: Optional[str] = None,
        pool: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            resp = self._client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RemoteUnavailable(cluster=cluster, pool=pool, detail=str(e)) from e

        if resp.status_code >= 500 or resp.status_code in (401, 403):
            raise RemoteUnavailable(
                cluster=cluster,
                pool=pool,
                detail=f"{method} {path} returned {resp.status_code}",
            )
        if resp.status_code == 404:
            if pool:
                raise PoolNotFound(cluster, pool)
            if cluster:
                raise ClusterNotFound(cluster)
        return resp

    @staticmethod
    def _json(resp: httpx.Response, cluster: Optional[str] = None, expected: type = list):
        """응답 본문 검증: 목록 API는 객체의 리스트, 단건 API는 객체"""
        if resp.status_code >= 400:
            raise RemoteUnavailable(
                cluster=cluster,
                detail=f"unexpected status {resp.status_code}: {resp.text[:200]}",
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise RemoteUnavailable(cluster=cluster, detail="response is not JSON") from e

        items = body if isinstance(body, list) else [body]
        if not isinstance(body, expected) or not all(isinstance(i, dict) for i in items):
            raise RemoteUnavailable(
                cluster=cluster,
                detail=f"unexpected response shape: expected {expected.__name__}, "
                       f"got {type(body).__name__}",
            )
        return body

    # ------------------------------------------------------------------
    # PoolGateway
    # ------------------------------------------------------------------

    def list_clusters(self) -> List[str]:
        resp = self._request("GET", "/v2/getClusters")
        return [c.get("name") for c in self._json(resp) if c.get("name")]

    def list_pools(self, cluster: str) -> List[WorkerPool]:
        resp = self._request("GET", "/v2/getWorkerPools", cluster=cluster, params={"cluster": cluster})
        return [parse_pool(p) for p in self._json(resp, cluster)]

    def get_pool(self, cluster: str, pool: str) -> WorkerPool:
        resp = self._request(
            "GET",
            "/v2/getWorkerPool",
            cluster=cluster,
            pool=pool,
            params={"cluster": cluster, "workerpool": pool},
        )
        return parse_pool(self._json(resp, cluster, expected=dict))

    def resize_pool(self, cluster: str, pool: str, size_per_zone: int) -> None:
        if size_per_zone < 0:
            raise ResizeRejected(cluster, pool, size_per_zone, "size must be >= 0")

        try:
            resp = self._request(
                "PATCH",
                f"/v1/clusters/{cluster}/workerpools/{pool}",
                cluster=cluster,
                pool=pool,
                json={"state": "resizing", "sizePerZone": size_per_zone},
            )
        except PoolNotFound as e:
            raise ResizeRejected(cluster, pool, size_per_zone, str(e)) from e

        if resp.status_code >= 400:
            raise ResizeRejected(cluster, pool, size_per_zone, resp.text[:200])
        logger.info(f"Resize requested: {cluster}/{pool} -> {size_per_zone} per zone")

    def list_workers(self, cluster: str) -> List[Worker]:
        resp = self._request("GET", "/v2/getWorkers", cluster=cluster, params={"cluster": cluster})
        return [parse_worker(w) for w in self._json(resp, cluster)]

    def get_cluster_state(self, cluster: str) -> str:
        try:
            resp = self._request("GET", "/v2/getCluster", cluster=cluster, params={"cluster": cluster})
            return self._json(resp, cluster, expected=dict).get("state") or UNKNOWN_STATE
        except GatewayError as e:
            logger.debug(f"Cluster state lookup failed for {cluster}: {e}")
            return UNKNOWN_STATE
