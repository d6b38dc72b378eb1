# Services - 하이버네이션 비즈니스 로직
from .gateway import PoolGateway, IBMCloudPoolGateway
from .state_store import (
    HibernationStateStore,
    FileHibernationStateStore,
    InMemoryHibernationStateStore,
)
from .reconciler import Reconciler, WaitOutcome
from .hibernation import HibernationOrchestrator
from .wake import WakeOrchestrator
from .fleet import FleetStatusReporter, derive_lifecycle_state
from .cost import CostEstimator
from .actions import HibernationService

__all__ = [
    'PoolGateway', 'IBMCloudPoolGateway',
    'HibernationStateStore', 'FileHibernationStateStore', 'InMemoryHibernationStateStore',
    'Reconciler', 'WaitOutcome',
    'HibernationOrchestrator', 'WakeOrchestrator',
    'FleetStatusReporter', 'derive_lifecycle_state',
    'CostEstimator', 'HibernationService',
]
