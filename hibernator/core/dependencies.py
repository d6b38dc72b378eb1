"""
서비스 인스턴스 생성
"""
import logging
from functools import lru_cache

from hibernator.core.config import settings
from hibernator.services.actions import HibernationService
from hibernator.services.gateway import IBMCloudPoolGateway
from hibernator.services.state_store import FileHibernationStateStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_hibernation_service() -> HibernationService:
    """IBM Cloud 게이트웨이 + 파일 기록 저장소로 구성된 서비스 (프로세스당 하나)"""
    logger.info(f"Hibernation records stored in: {settings.STATE_DIR}")
    return HibernationService(
        gateway=IBMCloudPoolGateway(),
        store=FileHibernationStateStore(settings.STATE_DIR),
    )
