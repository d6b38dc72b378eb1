# Pydantic models
from .cluster import WorkerState, ClusterLifecycleState, WorkerPool, Worker, FleetEntry
from .hibernation import (
    HibernationRecord, MalformedRecord, RecordSet, ActionStatus, OperationPhase,
    SizeSource, PoolOutcome, ActionResult, OperationStatus, OperationState,
    HibernateRequest, WakeRequest, CostInfo
)

__all__ = [
    # Cluster
    'WorkerState', 'ClusterLifecycleState', 'WorkerPool', 'Worker', 'FleetEntry',
    # Hibernation
    'HibernationRecord', 'MalformedRecord', 'RecordSet', 'ActionStatus', 'OperationPhase',
    'SizeSource', 'PoolOutcome', 'ActionResult', 'OperationStatus', 'OperationState',
    'HibernateRequest', 'WakeRequest', 'CostInfo',
]
