"""
Utility helper functions
"""
import re
from typing import Iterable, Optional

from hibernator.models.cluster import Worker, WorkerState

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def cluster_key(cluster_name: str) -> str:
    """클러스터 이름을 파일 이름에 쓸 수 있는 키로 변환"""
    key = _UNSAFE_KEY_CHARS.sub("_", cluster_name.strip())
    if not key or key.strip(".") == "":
        raise ValueError(f"Invalid cluster name: {cluster_name!r}")
    return key


def count_ready(workers: Iterable[Worker]) -> int:
    """normal 상태 워커 수"""
    return sum(1 for w in workers if w.state == WorkerState.NORMAL)


def parse_size(value) -> Optional[int]:
    """존당 워커 수 문자열을 정수로 변환 (실패 시 None)"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text.isdecimal():
        return None
    return int(text)


def format_cost(amount: float) -> str:
    """USD 금액 표시"""
    return f"${amount:,.2f}"
