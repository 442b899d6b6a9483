from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from .filters import IsActive, Predicate, all_of, matches
from .types import Item

SortSpec = Sequence[Tuple[str, bool]]  # (field, descending)

SORT_FIELDS = ("diagnostic_weight", "discrimination_index", "baseline_priority")


class ItemCatalog(Protocol):
    def find(
        self, predicate: Predicate, sort: SortSpec = (), limit: Optional[int] = None
    ) -> List[Item]: ...

    def count_active(self, predicate: Optional[Predicate] = None) -> int: ...


def _sort_key(item: Item, sort: SortSpec) -> tuple:
    key: list = []
    for name, descending in sort:
        if name not in SORT_FIELDS:
            raise ValueError(f"unsupported sort field {name!r}")
        val = getattr(item, name)
        if val is None:
            key.append((1, 0.0))
        else:
            key.append((0, -float(val) if descending else float(val)))
    return tuple(key)


class InMemoryCatalog:
    """Read-only catalog over a loaded item list; preserves bank order on ties."""

    def __init__(self, items: Iterable[Item]):
        self._items: List[Item] = list(items)

    def __len__(self) -> int:
        return len(self._items)

    def find(
        self, predicate: Predicate, sort: SortSpec = (), limit: Optional[int] = None
    ) -> List[Item]:
        hits = [it for it in self._items if matches(predicate, it)]
        if sort:
            hits.sort(key=lambda it: _sort_key(it, sort))
        if limit is not None:
            hits = hits[: max(0, int(limit))]
        return hits

    def count_active(self, predicate: Optional[Predicate] = None) -> int:
        pred = IsActive() if predicate is None else all_of(IsActive(), predicate)
        return sum(1 for it in self._items if matches(pred, it))
