"""
API Routers

- hibernation: 하이버네이션 / 웨이크 작업, 상태, 비용
- health: 헬스체크
"""
from .hibernation import router as hibernation_router
from .health import router as health_router

__all__ = [
    "hibernation_router",
    "health_router",
]
