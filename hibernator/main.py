"""
클러스터 하이버네이션 백엔드 API

API 구조:
- /api/hibernation/status      - 전체 클러스터 하이버네이션 상태
- /api/hibernation/cost        - 비용 추정
- /api/hibernation/records/*   - 원래 크기 기록
- /api/hibernation/hibernate   - 하이버네이션 시작
- /api/hibernation/wake        - 웨이크 시작
- /api/hibernation/operations  - 작업 상태 / 취소
- /api/health, /api/ibmcloud/health
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hibernator.core.config import settings
from hibernator.routers import hibernation_router, health_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# ============================================
# 라우터 등록
# ============================================
app.include_router(hibernation_router)
app.include_router(health_router)


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
