"""Kendall tau distance between sequences and between permutations.

The Kendall tau sequence distance is the minimum number of adjacent swaps
that turn one sequence into another. Sequences may contain duplicates; the
i-th occurrence of a value in ``a`` is matched with its i-th occurrence in
``b`` (Cicirello, "Kendall Tau Sequence Distance: Extending Kendall Tau from
Ranks to Sequences", 2019), which reduces the problem to counting the
inversions of a permutation of positions.

    >>> sequence_distance("abcdaabb", "dcbababa")
    9
"""
from __future__ import annotations
import logging
from typing import Any, Sequence, Union
import numpy as np
from config import get_settings
from distance import bucket_map, compose_inverse, count_inversions, is_permutation
from errors import IncompatibleElements, LengthMismatch
from relabel import Relabeler, get_relabeler

logger = logging.getLogger("ktsd.kendall_tau")


class KendallTauSequenceDistance:
    """Kendall tau distance for sequences that may contain duplicate elements.

    ``strategy`` picks how elements are mapped to integer labels:

    - ``"hash"``: elements need ``__eq__`` and ``__hash__``. O(n) relabeling.
    - ``"sort"``: elements need a total order. O(n log n) relabeling.

    A `Relabeler` instance may be given instead. When omitted, the strategy
    comes from `config.get_settings`. The choice is fixed for the lifetime
    of the measurer, and since every call works on its own arrays, one
    measurer can be shared between threads.
    """

    __slots__ = ("_relabeler",)

    def __init__(self, strategy: Union[str, Relabeler, None] = None):
        if strategy is None:
            strategy = get_settings().strategy
        self._relabeler = get_relabeler(strategy)
        logger.debug(f"Kendall tau sequence distance using {self._relabeler!r}")

    @property
    def relabeler(self) -> Relabeler:
        return self._relabeler

    def distance(self, a: Sequence[Any], b: Sequence[Any]) -> int:
        """Minimum number of adjacent swaps transforming ``a`` into ``b``.

        Raises `LengthMismatch` if the lengths differ and
        `IncompatibleElements` if ``b`` is not a rearrangement of ``a``.
        """
        n = len(a)
        if n != len(b):
            logger.debug(f"Length mismatch: {n} != {len(b)}")
            raise LengthMismatch(
                f"sequences must be the same length for Kendall tau distance, got {n} and {len(b)}"
            )
        if n == 0:
            return 0
        labels_a, labels_b, k = self._relabeler.relabel(a, b)
        mapping, bad_label = bucket_map(labels_a, labels_b, k)
        if bad_label >= 0:
            raise self._count_mismatch(a, labels_a, labels_b, int(bad_label))
        d = int(count_inversions(mapping))
        logger.debug(f"n = {n}, {k} distinct labels, distance {d}")
        return d

    def distancef(self, a: Sequence[Any], b: Sequence[Any]) -> float:
        return float(self.distance(a, b))

    @staticmethod
    def _count_mismatch(a, labels_a, labels_b, label: int) -> IncompatibleElements:
        first = int(np.argmax(labels_a == label))
        value = a[first]
        if isinstance(value, np.generic):
            value = value.item()
        in_a = int(np.count_nonzero(labels_a == label))
        in_b = int(np.count_nonzero(labels_b == label))
        logger.debug(f"Label {label} ({value!r}) occurs {in_a} times in a, {in_b} in b")
        return IncompatibleElements(
            f"sequences must contain the same elements: {value!r} occurs {in_a} times in a and {in_b} times in b"
        )

    def __repr__(self) -> str:
        return f"KendallTauSequenceDistance({self._relabeler.name!r})"


def sequence_distance(
    a: Sequence[Any], b: Sequence[Any], strategy: Union[str, Relabeler, None] = None
) -> int:
    return KendallTauSequenceDistance(strategy).distance(a, b)


def as_permutation_array(p: Sequence[int], name: str) -> np.ndarray:
    x = np.asarray(p)
    if x.ndim != 1 or (x.size > 0 and x.dtype.kind not in "iu"):
        logger.debug(f"{name} has dtype {x.dtype} and shape {x.shape}")
        raise IncompatibleElements(f"{name} is not a permutation: elements must be integers")
    return x.astype(np.int64)


class KendallTauDistance:
    """Kendall tau distance between two permutations of 0..n-1.

    Counts the pairs of elements the two permutations order differently.
    No relabeling or buckets are needed: ``p2`` is mapped through the
    inverse of ``p1`` and the inversions of the result are counted.
    """

    def distance(self, p1: Sequence[int], p2: Sequence[int]) -> int:
        x1 = as_permutation_array(p1, "p1")
        x2 = as_permutation_array(p2, "p2")
        if x1.size != x2.size:
            logger.debug(f"Length mismatch: {x1.size} != {x2.size}")
            raise LengthMismatch(
                f"permutations must be the same length, got {x1.size} and {x2.size}"
            )
        for name, x in (("p1", x1), ("p2", x2)):
            if not is_permutation(x):
                logger.debug(f"{name} is not a permutation")
                raise IncompatibleElements(f"{name} is not a permutation of 0..{x.size - 1}")
        return int(count_inversions(compose_inverse(x1, x2)))

    def max(self, length: int) -> int:
        """Largest distance between permutations of this length."""
        if length <= 1:
            return 0
        return length * (length - 1) // 2

    def normalized_distance(self, p1: Sequence[int], p2: Sequence[int]) -> float:
        """Distance scaled into [0, 1] by `max`."""
        d = self.distance(p1, p2)
        m = self.max(len(p1))
        return d / m if m > 0 else 0.0


__all__ = ["KendallTauSequenceDistance", "KendallTauDistance", "sequence_distance"]
