"""
Integration tests for health check API
"""
import pytest

from hibernator.core.errors import RemoteUnavailable


class TestHealthAPI:
    """Tests for /api/health endpoints"""

    def test_health_check(self, client):
        """Test basic health check"""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "cluster-hibernator"

    def test_ibmcloud_health_connected(self, client):
        response = client.get("/api/ibmcloud/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "connected"
        assert data["clusters"] == 1

    def test_ibmcloud_health_disconnected(self, client, gateway):
        gateway.list_clusters_error = RemoteUnavailable(detail="IBMCLOUD_API_KEY is not set")

        response = client.get("/api/ibmcloud/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "disconnected"
        assert "IBMCLOUD_API_KEY" in data["error"]


@pytest.mark.asyncio
class TestHealthAPIAsync:
    """Async tests for health API"""

    async def test_health_check_async(self, async_client):
        """Test health check with async client"""
        response = await async_client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
