# Utility functions
from .helpers import cluster_key, count_ready, parse_size, format_cost
from .config import (
    HIBERNATED_SIZE_PER_ZONE, DEFAULT_WAKE_SIZE_PER_ZONE, HOURS_PER_MONTH,
    WORKER_READY_STATE, UNKNOWN_STATE,
)
from .cluster_ref import resolve_cluster_name, cluster_from_terraform, cluster_from_kubeconfig

__all__ = [
    'cluster_key', 'count_ready', 'parse_size', 'format_cost',
    'HIBERNATED_SIZE_PER_ZONE', 'DEFAULT_WAKE_SIZE_PER_ZONE', 'HOURS_PER_MONTH',
    'WORKER_READY_STATE', 'UNKNOWN_STATE',
    'resolve_cluster_name', 'cluster_from_terraform', 'cluster_from_kubeconfig',
]
