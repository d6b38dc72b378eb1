"""
Pytest configuration and fixtures
"""
import pytest
from typing import AsyncGenerator, Dict, Generator, List, Optional, Tuple
from unittest.mock import patch

from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from hibernator.core.errors import ClusterNotFound, PoolNotFound, ResizeRejected
from hibernator.models.cluster import Worker, WorkerPool, WorkerState
from hibernator.services.actions import HibernationService
from hibernator.services.gateway import PoolGateway
from hibernator.services.reconciler import Reconciler
from hibernator.services.state_store import InMemoryHibernationStateStore


# ============================================
# Fakes
# ============================================

class FakeClock:
    """Manually advanced clock; sleep() moves time forward instantly"""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakePoolGateway(PoolGateway):
    """In-memory control plane

    Accepted resizes update the pool immediately and, unless apply_resizes is
    False, regenerate one normal worker per pool slot.
    """

    def __init__(self):
        self.pools: Dict[str, Dict[str, WorkerPool]] = {}
        self.workers: Dict[str, List[Worker]] = {}
        self.states: Dict[str, str] = {}
        self.resize_calls: List[Tuple[str, str, int]] = []
        self.resize_errors: Dict[Tuple[str, str], Exception] = {}
        self.worker_errors: Dict[str, Exception] = {}
        self.list_clusters_error: Optional[Exception] = None
        self.apply_resizes = True

    def add_cluster(self, name: str, pools: Dict[str, Tuple[int, int]], state: str = "normal"):
        """pools: {pool name: (size per zone, zone count)}"""
        self.pools[name] = {
            pool: WorkerPool(name=pool, size_per_zone=size, zone_count=zones)
            for pool, (size, zones) in pools.items()
        }
        self.states[name] = state
        self.sync_workers(name)

    def sync_workers(self, cluster: str) -> None:
        self.workers[cluster] = [
            Worker(id=f"{cluster}-{pool.name}-{i}", state=WorkerState.NORMAL, pool_name=pool.name)
            for pool in self.pools[cluster].values()
            for i in range(pool.total_workers)
        ]

    def _cluster(self, cluster: str) -> Dict[str, WorkerPool]:
        if cluster not in self.pools:
            raise ClusterNotFound(cluster)
        return self.pools[cluster]

    def list_clusters(self) -> List[str]:
        if self.list_clusters_error:
            raise self.list_clusters_error
        return list(self.pools)

    def list_pools(self, cluster: str) -> List[WorkerPool]:
        return [p.model_copy() for p in self._cluster(cluster).values()]

    def get_pool(self, cluster: str, pool: str) -> WorkerPool:
        pools = self._cluster(cluster)
        if pool not in pools:
            raise PoolNotFound(cluster, pool)
        return pools[pool].model_copy()

    def resize_pool(self, cluster: str, pool: str, size_per_zone: int) -> None:
        self.resize_calls.append((cluster, pool, size_per_zone))
        error = self.resize_errors.get((cluster, pool))
        if error:
            raise error
        pools = self._cluster(cluster)
        if pool not in pools:
            raise ResizeRejected(cluster, pool, size_per_zone, "pool not found")
        pools[pool].size_per_zone = size_per_zone
        if self.apply_resizes:
            self.sync_workers(cluster)

    def list_workers(self, cluster: str) -> List[Worker]:
        if cluster in self.worker_errors:
            raise self.worker_errors[cluster]
        self._cluster(cluster)
        return list(self.workers.get(cluster, []))

    def get_cluster_state(self, cluster: str) -> str:
        return self.states.get(cluster, "unknown")


def make_reconciler_factory():
    """Reconciler per run, each with its own fake clock"""

    def factory(event):
        clock = FakeClock()
        return Reconciler(clock=clock, sleep=clock.sleep, cancel_event=event)

    return factory


# ============================================
# Settings Fixtures
# ============================================

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    """Point record files and cluster lookup at a temp directory"""
    from hibernator.core.config import settings

    original = (settings.STATE_DIR, settings.DEFAULT_CLUSTER_NAME, settings.TERRAFORM_DIR)
    settings.STATE_DIR = str(tmp_path / "state")
    settings.DEFAULT_CLUSTER_NAME = ""
    settings.TERRAFORM_DIR = str(tmp_path)

    yield settings

    settings.STATE_DIR, settings.DEFAULT_CLUSTER_NAME, settings.TERRAFORM_DIR = original


# ============================================
# Service Fixtures
# ============================================

@pytest.fixture
def empty_gateway() -> FakePoolGateway:
    """Fake control plane with no clusters"""
    return FakePoolGateway()


@pytest.fixture
def gateway() -> FakePoolGateway:
    """Fake control plane with cluster 'demo' (default pool: 3 per zone, 3 zones)"""
    gw = FakePoolGateway()
    gw.add_cluster("demo", {"default": (3, 3)})
    return gw


@pytest.fixture
def store() -> InMemoryHibernationStateStore:
    return InMemoryHibernationStateStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reconciler(clock) -> Reconciler:
    return Reconciler(clock=clock, sleep=clock.sleep)


@pytest.fixture
def service(gateway, store) -> HibernationService:
    return HibernationService(
        gateway=gateway,
        store=store,
        reconciler_factory=make_reconciler_factory(),
        hibernate_poll_interval=60,
        hibernate_max_wait=300,
        wake_poll_interval=120,
        wake_max_wait=600,
    )


# ============================================
# App Fixtures
# ============================================

@pytest.fixture(scope="session")
def app():
    """Create FastAPI app for testing"""
    from hibernator.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def mock_service(service) -> Generator:
    """Route handlers use the fake-backed service"""
    with patch("hibernator.routers.hibernation.get_hibernation_service", return_value=service), \
            patch("hibernator.routers.health.get_hibernation_service", return_value=service):
        yield service


@pytest.fixture
def client(app, mock_service) -> Generator:
    """Synchronous test client"""
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def async_client(app, mock_service) -> AsyncGenerator:
    """Asynchronous test client"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
