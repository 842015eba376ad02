from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from bisect import bisect_left
from typing import Any, ClassVar, Optional, Sequence, Tuple, Union
import numba as nb
import numpy as np
from errors import IncompatibleElements

logger = logging.getLogger("ktsd.relabel")

Relabeling = Tuple[np.ndarray, np.ndarray, int]
""" ``(labels_a, labels_b, k)``: per-position labels of both sequences in the label space of ``a``. """


def unknown_element(index: int, value: Any) -> IncompatibleElements:
    logger.debug(f"b[{index}] = {value!r} has no label in a")
    return IncompatibleElements(
        f"sequences must contain the same elements: b[{index}] = {value!r} does not occur in a"
    )


def is_bytes_like(s: Any) -> bool:
    if isinstance(s, (bytes, bytearray)):
        return True
    return isinstance(s, memoryview) and s.ndim == 1 and s.format == "B" and s.c_contiguous


def byte_views(a: Any, b: Any) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """Both sequences as uint8 arrays, or None.

    Only inputs holding the same kind of one-byte item qualify: two
    bytes-like objects, or two numpy arrays of one dtype. Reinterpreting
    int8 and uint8 against each other would make -1 equal 255.
    """
    if is_bytes_like(a) and is_bytes_like(b):
        return np.frombuffer(a, dtype=np.uint8), np.frombuffer(b, dtype=np.uint8)
    if (
        isinstance(a, np.ndarray)
        and isinstance(b, np.ndarray)
        and a.dtype == b.dtype
        and a.ndim == b.ndim == 1
        and a.dtype.kind in "biu"
        and a.dtype.itemsize == 1
    ):
        return a.view(np.uint8), b.view(np.uint8)
    return None


def as_items(s: Any) -> Sequence[Any]:
    if isinstance(s, np.ndarray):
        return s.tolist()
    return s


@nb.njit(cache=True, fastmath=True)
def byte_labels(va, vb):
    """First-appearance labels through a 256 entry table.

    Returns ``(labels_a, labels_b, k, bad)`` where ``bad`` is the first
    position of b holding a byte absent from a, or -1.
    """
    table = np.full(256, -1, np.int64)
    k = 0
    for x in va:
        if table[x] < 0:
            table[x] = k
            k += 1
    n = va.size
    labels_a = np.empty(n, np.int64)
    labels_b = np.empty(n, np.int64)
    for i in range(n):
        labels_a[i] = table[va[i]]
        lb = table[vb[i]]
        if lb < 0:
            return labels_a, labels_b, k, i
        labels_b[i] = lb
    return labels_a, labels_b, k, -1


class Relabeler(ABC):
    """Maps two equal-length sequences onto dense integer labels 0..k-1.

    The label space is the set of distinct values of ``a``; a value of ``b``
    outside it raises `IncompatibleElements`. Implementations keep no state
    between calls.
    """

    name: ClassVar[str]

    def relabel(self, a: Sequence[Any], b: Sequence[Any]) -> Relabeling:
        if len(a) == 0:
            empty = np.empty(0, np.int64)
            return empty, empty.copy(), 0
        return self._relabel(a, b)

    @abstractmethod
    def _relabel(self, a: Sequence[Any], b: Sequence[Any]) -> Relabeling:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HashRelabeler(Relabeler):
    """Labels values in order of first appearance in ``a`` using a dict.

    Needs elements with ``__eq__`` and a consistent ``__hash__``. Byte-wide
    inputs go through a direct-indexed table instead.
    """

    name = "hash"

    def _relabel(self, a, b):
        views = byte_views(a, b)
        if views is not None:
            va, vb = views
            logger.debug(f"Relabeling {va.size} bytes through a direct table.")
            labels_a, labels_b, k, bad = byte_labels(va, vb)
            if bad >= 0:
                raise unknown_element(int(bad), b[int(bad)])
            return labels_a, labels_b, int(k)

        a = as_items(a)
        b = as_items(b)
        labels: dict = {}
        for x in a:
            labels.setdefault(x, len(labels))
        labels_a = np.fromiter((labels[x] for x in a), dtype=np.int64, count=len(a))
        labels_b = np.empty(len(b), np.int64)
        for i, x in enumerate(b):
            label = labels.get(x)
            if label is None:
                raise unknown_element(i, x)
            labels_b[i] = label
        return labels_a, labels_b, len(labels)


class SortRelabeler(Relabeler):
    """Labels values by their rank among the distinct values of ``a``.

    Needs a total order on the elements; no hashing is done. A sorted copy
    of ``a`` is split into runs of equal values, one label per run, and
    every element is located in it by binary search.
    """

    name = "sort"

    def _relabel(self, a, b):
        if (
            isinstance(a, np.ndarray)
            and isinstance(b, np.ndarray)
            and a.ndim == b.ndim == 1
            and (a.dtype == b.dtype or (a.dtype.kind in "biuf" and b.dtype.kind in "biuf"))
        ):
            return self._relabel_arrays(a, b)

        ordered = sorted(as_items(a))
        n = len(ordered)
        runs = [0] * n
        current = 0
        for i in range(1, n):
            if ordered[i] != ordered[i - 1]:
                current += 1
            runs[i] = current

        labels_a = np.empty(n, np.int64)
        for i, x in enumerate(as_items(a)):
            labels_a[i] = runs[bisect_left(ordered, x)]
        labels_b = np.empty(n, np.int64)
        for i, x in enumerate(as_items(b)):
            try:
                j = bisect_left(ordered, x)
            except TypeError as e:
                raise unknown_element(i, x) from e
            if j == n or ordered[j] != x:
                raise unknown_element(i, x)
            labels_b[i] = runs[j]
        return labels_a, labels_b, current + 1

    def _relabel_arrays(self, a: np.ndarray, b: np.ndarray) -> Relabeling:
        ordered = np.sort(a)
        n = ordered.size
        boundary = np.zeros(n, np.int64)
        boundary[1:] = ordered[1:] != ordered[:-1]
        runs = np.cumsum(boundary)

        labels_a = runs[np.searchsorted(ordered, a)]
        j = np.minimum(np.searchsorted(ordered, b), n - 1)
        found = ordered[j] == b
        if not found.all():
            i = int(np.argmin(found))
            raise unknown_element(i, b[i].item())
        return labels_a.astype(np.int64), runs[j].astype(np.int64), int(runs[-1]) + 1


RELABELERS = {
    HashRelabeler.name: HashRelabeler,
    SortRelabeler.name: SortRelabeler,
}


def get_relabeler(strategy: Union[str, Relabeler]) -> Relabeler:
    """Resolve a strategy name ("hash" or "sort") or pass a Relabeler through."""
    if isinstance(strategy, Relabeler):
        return strategy
    try:
        cls = RELABELERS[strategy]
    except KeyError:
        raise ValueError(
            f"unknown relabeling strategy {strategy!r}, expected one of {sorted(RELABELERS)}"
        ) from None
    return cls()


__all__ = [
    "Relabeling",
    "Relabeler",
    "HashRelabeler",
    "SortRelabeler",
    "RELABELERS",
    "get_relabeler",
    "byte_views",
]
