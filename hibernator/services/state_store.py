"""
원래 워커 풀 크기 기록 저장소

클러스터별 기록 형식 (한 줄에 한 풀):
    poolName:originalSizePerZone

- 빈 줄은 무시
- name:정수 형식이 아니거나 1 미만인 줄은 버리고 malformed로 표시
- 같은 풀이 여러 번 나오면 첫 줄이 원래 크기 (나머지는 malformed)

append_record는 클러스터 단위 잠금 아래에서 중복 검사 후 기록한다.
"""
import os
import re
import fcntl
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from hibernator.core.config import settings
from hibernator.core.errors import DuplicateRecord, RecordSetNotFound
from hibernator.models.hibernation import HibernationRecord, MalformedRecord, RecordSet
from hibernator.utils.config import RECORD_FILE_SUFFIX, LOCK_FILE_SUFFIX
from hibernator.utils.helpers import cluster_key

logger = logging.getLogger(__name__)

_RECORD_LINE = re.compile(r"^(?P<pool>[^:\s][^:]*?)\s*:\s*(?P<size>\d+)$")


def format_record_line(pool: str, size_per_zone: int) -> str:
    return f"{pool}:{size_per_zone}"


def parse_record_lines(lines: Iterable[str]) -> Tuple[Dict[str, int], List[MalformedRecord]]:
    """기록 줄 파싱

    Returns:
        (풀 → 원래 크기, 파싱 실패 목록)
    """
    sizes: Dict[str, int] = {}
    malformed: List[MalformedRecord] = []

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        pool_name = line.split(":", 1)[0].strip() or None
        match = _RECORD_LINE.match(line)
        if not match:
            malformed.append(MalformedRecord(line_number=line_number, raw=line, pool_name=pool_name))
            continue

        pool, size = match.group("pool").strip(), int(match.group("size"))
        if size < 1:
            malformed.append(MalformedRecord(line_number=line_number, raw=line, pool_name=pool))
        elif pool in sizes:
            # 이전 도구가 두 번째 하이버네이션에서 덧붙인 중간 크기
            logger.warning(f"Duplicate record line for pool '{pool}' ignored: {line}")
            malformed.append(MalformedRecord(line_number=line_number, raw=line, pool_name=None))
        else:
            sizes[pool] = size

    return sizes, malformed


def _recorded_pools(lines: Iterable[str]) -> set:
    sizes, malformed = parse_record_lines(lines)
    return set(sizes) | {m.pool_name for m in malformed if m.pool_name}


class HibernationStateStore(ABC):
    """Per-cluster store of original worker pool sizes"""

    @abstractmethod
    def has_record_set(self, cluster: str) -> bool:
        ...

    @abstractmethod
    def append_record(self, cluster: str, pool: str, original_size_per_zone: int) -> HibernationRecord:
        """풀의 원래 크기 기록

        Raises:
            DuplicateRecord: (cluster, pool) 기록이 이미 있는 경우
            ValueError: 크기가 1 미만인 경우
        """

    @abstractmethod
    def read_all(self, cluster: str) -> RecordSet:
        """클러스터의 기록 전체

        Raises:
            RecordSetNotFound: 기록이 없는 경우
        """

    @abstractmethod
    def discard_record(self, cluster: str, pool: str) -> None:
        """풀 하나의 기록 삭제 (없으면 무시)"""

    @abstractmethod
    def clear(self, cluster: str) -> None:
        """클러스터 기록 전체 삭제 (없으면 무시)"""

    @staticmethod
    def _validate(cluster: str, pool: str, original_size_per_zone: int) -> None:
        if not pool or ":" in pool or pool != pool.strip():
            raise ValueError(f"Invalid worker pool name {pool!r} for cluster '{cluster}'")
        if original_size_per_zone < 1:
            raise ValueError(
                f"Original size for worker pool '{pool}' of cluster '{cluster}' "
                f"must be >= 1, got {original_size_per_zone}"
            )


class FileHibernationStateStore(HibernationStateStore):
    """클러스터별 텍스트 파일 저장소

    {state_dir}/{cluster}_original_counts.txt 에 기록하고,
    {cluster}_original_counts.lock 파일에 flock을 걸어 동시 실행을 막는다.
    """

    def __init__(self, state_dir: Optional[str] = None):
        self.state_dir = Path(state_dir or settings.STATE_DIR)

    def record_path(self, cluster: str) -> Path:
        return self.state_dir / f"{cluster_key(cluster)}{RECORD_FILE_SUFFIX}"

    def _lock_path(self, cluster: str) -> Path:
        return self.state_dir / f"{cluster_key(cluster)}{LOCK_FILE_SUFFIX}"

    @contextmanager
    def _locked(self, cluster: str):
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(self._lock_path(cluster), "a+") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _read_lines(self, cluster: str) -> Optional[List[str]]:
        path = self.record_path(cluster)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read().splitlines()
        except FileNotFoundError:
            return None

    def has_record_set(self, cluster: str) -> bool:
        return self.record_path(cluster).exists()

    def append_record(self, cluster: str, pool: str, original_size_per_zone: int) -> HibernationRecord:
        self._validate(cluster, pool, original_size_per_zone)

        with self._locked(cluster):
            lines = self._read_lines(cluster) or []
            if pool in _recorded_pools(lines):
                raise DuplicateRecord(cluster, pool)

            with open(self.record_path(cluster), "a", encoding="utf-8") as f:
                f.write(format_record_line(pool, original_size_per_zone) + "\n")
                f.flush()
                os.fsync(f.fileno())

        logger.info(f"Recorded original size {cluster}/{pool}: {original_size_per_zone} per zone")
        return HibernationRecord(
            cluster_name=cluster,
            pool_name=pool,
            original_size_per_zone=original_size_per_zone,
        )

    def read_all(self, cluster: str) -> RecordSet:
        with self._locked(cluster):
            lines = self._read_lines(cluster)

        if lines is None:
            raise RecordSetNotFound(cluster)

        sizes, malformed = parse_record_lines(lines)
        for entry in malformed:
            logger.warning(
                f"Malformed hibernation record for cluster '{cluster}' "
                f"(line {entry.line_number}): {entry.raw!r}"
            )
        return RecordSet(cluster_name=cluster, sizes=sizes, malformed=malformed)

    def discard_record(self, cluster: str, pool: str) -> None:
        with self._locked(cluster):
            lines = self._read_lines(cluster)
            if lines is None:
                return

            kept = [line for line in lines if line.split(":", 1)[0].strip() != pool]
            path = self.record_path(cluster)
            if not any(line.strip() for line in kept):
                path.unlink(missing_ok=True)
                return

            tmp_path = path.with_name(path.name + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write("\n".join(kept) + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)

        logger.info(f"Discarded hibernation record {cluster}/{pool}")

    def clear(self, cluster: str) -> None:
        with self._locked(cluster):
            self.record_path(cluster).unlink(missing_ok=True)
        logger.info(f"Cleared hibernation records for cluster '{cluster}'")


class InMemoryHibernationStateStore(HibernationStateStore):
    """메모리 저장소 (테스트 / 임베딩용)"""

    def __init__(self):
        self._lock = threading.Lock()
        self._lines: Dict[str, List[str]] = {}

    def seed(self, cluster: str, lines: Iterable[str]) -> None:
        """원시 기록 줄을 그대로 넣는다 (손상된 기록 재현용)"""
        with self._lock:
            self._lines[cluster] = list(lines)

    def lines(self, cluster: str) -> List[str]:
        with self._lock:
            return list(self._lines.get(cluster, []))

    def has_record_set(self, cluster: str) -> bool:
        with self._lock:
            return cluster in self._lines

    def append_record(self, cluster: str, pool: str, original_size_per_zone: int) -> HibernationRecord:
        self._validate(cluster, pool, original_size_per_zone)

        with self._lock:
            if pool in _recorded_pools(self._lines.get(cluster, [])):
                raise DuplicateRecord(cluster, pool)
            self._lines.setdefault(cluster, []).append(format_record_line(pool, original_size_per_zone))

        return HibernationRecord(
            cluster_name=cluster,
            pool_name=pool,
            original_size_per_zone=original_size_per_zone,
        )

    def read_all(self, cluster: str) -> RecordSet:
        with self._lock:
            if cluster not in self._lines:
                raise RecordSetNotFound(cluster)
            lines = list(self._lines[cluster])

        sizes, malformed = parse_record_lines(lines)
        return RecordSet(cluster_name=cluster, sizes=sizes, malformed=malformed)

    def discard_record(self, cluster: str, pool: str) -> None:
        with self._lock:
            if cluster not in self._lines:
                return
            kept = [line for line in self._lines[cluster] if line.split(":", 1)[0].strip() != pool]
            if any(line.strip() for line in kept):
                self._lines[cluster] = kept
            else:
                del self._lines[cluster]

    def clear(self, cluster: str) -> None:
        with self._lock:
            self._lines.pop(cluster, None)
