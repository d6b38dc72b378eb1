"""
Integration tests for hibernation API
"""
import pytest

from hibernator.core.errors import RemoteUnavailable


class TestStatusAPI:
    """Tests for read-only endpoints"""

    def test_fleet_status(self, client, gateway):
        gateway.add_cluster("idle", {"default": (0, 2)})

        response = client.get("/api/hibernation/status")

        assert response.status_code == 200
        data = {e["cluster_name"]: e for e in response.json()}
        assert data["demo"]["classification"] == "active"
        assert data["demo"]["worker_count"] == 9
        assert data["idle"]["classification"] == "hibernated"

    def test_fleet_status_unavailable(self, client, gateway):
        gateway.list_clusters_error = RemoteUnavailable(detail="timeout")
        response = client.get("/api/hibernation/status")
        assert response.status_code == 503

    def test_cost(self, client):
        response = client.get("/api/hibernation/cost", params={"cluster": "demo"})
        assert response.status_code == 200
        data = response.json()
        assert data["full_workers"] == 9
        assert data["hibernated_workers"] == 3
        assert data["notes"]

    def test_cost_unknown_cluster(self, client):
        response = client.get("/api/hibernation/cost", params={"cluster": "missing"})
        assert response.status_code == 404

    def test_cost_default_cluster(self, client, isolated_settings):
        isolated_settings.DEFAULT_CLUSTER_NAME = "demo"
        response = client.get("/api/hibernation/cost")
        assert response.status_code == 200
        assert response.json()["cluster_name"] == "demo"

    def test_records_missing(self, client):
        response = client.get("/api/hibernation/records/demo")
        assert response.status_code == 404

    def test_records(self, client, store):
        store.seed("demo", ["default:3", "poolX:"])

        response = client.get("/api/hibernation/records/demo")

        assert response.status_code == 200
        data = response.json()
        assert data["sizes"] == {"default": 3}
        assert data["malformed"][0]["pool_name"] == "poolX"


class TestOperationAPI:
    """Tests for hibernate / wake operations"""

    def test_hibernate(self, client, gateway, store):
        response = client.post("/api/hibernation/hibernate", json={"cluster": "demo"})

        assert response.status_code == 202
        op = response.json()
        assert op["action"] == "hibernate"
        assert op["cluster_name"] == "demo"

        # TestClient runs background tasks before returning
        response = client.get(f"/api/hibernation/operations/{op['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["result"]["status"] == "success"
        assert data["result"]["phase"] == "hibernated"
        assert gateway.resize_calls == [("demo", "default", 1)]
        assert store.read_all("demo").sizes == {"default": 3}

    def test_hibernate_then_wake(self, client, gateway, store):
        client.post("/api/hibernation/hibernate", json={"cluster": "demo"})
        response = client.post("/api/hibernation/wake", json={"cluster": "demo"})

        assert response.status_code == 202
        op = client.get(f"/api/hibernation/operations/{response.json()['id']}").json()
        assert op["result"]["status"] == "success"
        assert gateway.resize_calls[-1] == ("demo", "default", 3)
        assert not store.has_record_set("demo")

    def test_wake_with_sizes(self, client, gateway):
        gateway.add_cluster("demo", {"default": (1, 3)})

        response = client.post("/api/hibernation/wake", json={"cluster": "demo", "sizes": {"default": 4}})

        op = client.get(f"/api/hibernation/operations/{response.json()['id']}").json()
        assert op["result"]["status"] == "success_with_warning"
        assert gateway.resize_calls == [("demo", "default", 4)]

    def test_hibernate_force(self, client, gateway):
        gateway.workers["demo"] = gateway.workers["demo"][:4]

        response = client.post("/api/hibernation/hibernate", json={"cluster": "demo", "force": True})

        op = client.get(f"/api/hibernation/operations/{response.json()['id']}").json()
        assert op["result"]["phase"] == "hibernated"

    def test_hibernate_not_active_without_force(self, client, gateway):
        gateway.workers["demo"] = gateway.workers["demo"][:4]

        response = client.post("/api/hibernation/hibernate", json={"cluster": "demo"})

        op = client.get(f"/api/hibernation/operations/{response.json()['id']}").json()
        assert op["result"]["status"] == "success_with_warning"
        assert op["result"]["phase"] == "active"
        assert gateway.resize_calls == []

    def test_hibernate_twice(self, client):
        client.post("/api/hibernation/hibernate", json={"cluster": "demo"})
        response = client.post("/api/hibernation/hibernate", json={"cluster": "demo"})

        op = client.get(f"/api/hibernation/operations/{response.json()['id']}").json()
        assert op["result"]["status"] == "failure"
        assert "already hibernating" in op["result"]["reason"]

    def test_empty_cluster_name(self, client):
        response = client.post("/api/hibernation/hibernate", json={"cluster": "  "})
        assert response.status_code == 400

    def test_operation_in_progress(self, client, mock_service):
        mock_service.start_operation("hibernate", "demo")
        response = client.post("/api/hibernation/wake", json={"cluster": "demo"})
        assert response.status_code == 409

    def test_list_operations(self, client):
        client.post("/api/hibernation/hibernate", json={"cluster": "demo"})
        response = client.get("/api/hibernation/operations")
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_cancel_pending_operation(self, client, mock_service):
        op = mock_service.start_operation("hibernate", "demo")
        response = client.post(f"/api/hibernation/operations/{op.id}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelling"

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/hibernation/operations/nope"),
        ("post", "/api/hibernation/operations/nope/cancel"),
    ])
    def test_unknown_operation(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestHibernationAPIAsync:
    """Async tests for hibernation API"""

    async def test_status_async(self, async_client):
        response = await async_client.get("/api/hibernation/status")
        assert response.status_code == 200
        assert response.json()[0]["cluster_name"] == "demo"
