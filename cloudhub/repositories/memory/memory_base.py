import itertools
import threading
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class MemoryTable(Generic[T]):
    """
    딕셔너리 기반의 단순한 테이블.

    ID는 종류별 카운터로 1부터 순서대로 할당되며, 삭제되어도 재사용되지 않습니다.
    단일 레코드 단위의 읽기/쓰기만 잠금으로 보호합니다.
    """

    def __init__(self):
        self._rows: Dict[int, T] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, row: T) -> T:
        with self._lock:
            row.id = next(self._ids)
            self._rows[row.id] = row
        return row

    def get(self, row_id: int) -> Optional[T]:
        return self._rows.get(row_id)

    def select(self, predicate: Callable[[T], bool] = lambda row: True) -> List[T]:
        return [row for row in list(self._rows.values()) if predicate(row)]

    def patch(self, row_id: int, fields: Dict[str, Any]) -> Optional[T]:
        with self._lock:
            row = self._rows.get(row_id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
        return row

    def remove(self, row_id: int) -> bool:
        with self._lock:
            return self._rows.pop(row_id, None) is not None

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        with self._lock:
            doomed = [row_id for row_id, row in self._rows.items() if predicate(row)]
            for row_id in doomed:
                del self._rows[row_id]
        return len(doomed)


def newest_first(rows: Iterable[Any], limit: Optional[int] = None) -> List[Any]:
    """timestamp 내림차순, 같은 시각이면 ID 내림차순으로 정렬합니다."""
    ordered = sorted(rows, key=lambda row: (row.timestamp, row.id), reverse=True)
    return ordered if limit is None else ordered[:limit]
