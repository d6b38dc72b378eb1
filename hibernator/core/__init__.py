# Core module - configuration, errors
from .config import settings
from .errors import (
    HibernationError,
    GatewayError,
    RemoteUnavailable,
    ClusterNotFound,
    PoolNotFound,
    ResizeRejected,
    StateStoreError,
    DuplicateRecord,
    RecordSetNotFound,
    AlreadyHibernating,
    ClusterNotResolved,
    OperationInProgress,
)

__all__ = [
    'settings',
    'HibernationError', 'GatewayError', 'RemoteUnavailable', 'ClusterNotFound',
    'PoolNotFound', 'ResizeRejected', 'StateStoreError', 'DuplicateRecord',
    'RecordSetNotFound', 'AlreadyHibernating', 'ClusterNotResolved', 'OperationInProgress',
]
