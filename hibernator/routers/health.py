"""
Health check API
"""
from fastapi import APIRouter

from hibernator.core.dependencies import get_hibernation_service

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check():
    """API 헬스체크"""
    return {"status": "healthy", "service": "cluster-hibernator"}


@router.get("/api/ibmcloud/health")
def ibmcloud_health_check():
    """IBM Cloud 컨트롤 플레인 연결 헬스체크"""
    try:
        clusters = get_hibernation_service().gateway.list_clusters()
        return {"status": "connected", "clusters": len(clusters)}
    except Exception as e:
        return {"status": "disconnected", "error": str(e)}
