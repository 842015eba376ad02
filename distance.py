from __future__ import annotations
import numpy as np
import numba as nb


@nb.njit(cache=True, fastmath=True)
def invert(perm):
    n = perm.size
    out = np.empty(n, np.int64)
    for i in range(n):
        out[int(perm[i])] = i
    return out


@nb.njit(cache=True, fastmath=True)
def is_permutation(perm):
    n = perm.size
    seen = np.zeros(n, np.uint8)
    for i in range(n):
        v = int(perm[i])
        if v < 0 or v >= n or seen[v] != 0:
            return False
        seen[v] = 1
    return True


@nb.njit(cache=True, fastmath=True)
def compose_inverse(p1, p2):
    """Relabel p2 through the inverse of p1, i.e. out[i] = p1^-1[p2[i]]."""
    inv1 = invert(p1)
    n = p2.size
    out = np.empty(n, np.int64)
    for i in range(n):
        out[i] = inv1[int(p2[i])]
    return out


@nb.njit(cache=True, fastmath=True)
def bucket_map(labels_a, labels_b, k):
    """Pair the i-th occurrence of every label in a with its i-th occurrence in b.

    Buckets are laid out contiguously, counting-sort style: one pass counts
    the occurrences per label, a second pass fills positions left to right,
    so each bucket holds its positions in original (FIFO) order.

    Returns ``(mapping, bad_label)``. ``mapping[p]`` is the position in b
    paired with position p in a. ``bad_label`` is -1 on success, otherwise
    the first label whose occurrence counts differ between a and b, in
    which case ``mapping`` is incomplete.
    """
    n = labels_a.size
    start_a = np.zeros(k + 1, np.int64)
    start_b = np.zeros(k + 1, np.int64)
    for i in range(n):
        start_a[int(labels_a[i]) + 1] += 1
        start_b[int(labels_b[i]) + 1] += 1
    for label in range(k):
        start_a[label + 1] += start_a[label]
        start_b[label + 1] += start_b[label]

    bucket_a = np.empty(n, np.int64)
    bucket_b = np.empty(n, np.int64)
    tail_a = start_a.copy()
    tail_b = start_b.copy()
    for i in range(n):
        la = int(labels_a[i])
        bucket_a[tail_a[la]] = i
        tail_a[la] += 1
        lb = int(labels_b[i])
        bucket_b[tail_b[lb]] = i
        tail_b[lb] += 1

    mapping = np.empty(n, np.int64)
    for label in range(k):
        head_a = start_a[label]
        head_b = start_b[label]
        end_a = start_a[label + 1]
        end_b = start_b[label + 1]
        while head_a < end_a:
            # b ran out of this label first
            if head_b == end_b:
                return mapping, label
            mapping[bucket_a[head_a]] = bucket_b[head_b]
            head_a += 1
            head_b += 1
        # b has leftovers of this label
        if head_b != end_b:
            return mapping, label
    return mapping, -1


@nb.njit(cache=True, fastmath=True)
def count_inversions(perm):
    """Number of pairs p < q with perm[p] > perm[q], by merge sort.

    Runs of width 1, 2, 4, ... are merged pairwise; whenever an element of
    the right run is placed ahead of the remaining left run, every element
    still left in that run forms an inversion with it. The input is not
    modified; one scratch buffer alternates with the working copy between
    merge levels.
    """
    n = perm.size
    src = np.empty(n, np.int64)
    for i in range(n):
        src[i] = perm[i]
    dst = np.empty(n, np.int64)
    count = 0
    width = 1
    while width < n:
        for lo in range(0, n, 2 * width):
            mid = min(lo + width, n)
            hi = min(lo + 2 * width, n)
            i = lo
            j = mid
            k = lo
            while i < mid and j < hi:
                if src[i] <= src[j]:
                    dst[k] = src[i]
                    i += 1
                else:
                    count += mid - i
                    dst[k] = src[j]
                    j += 1
                k += 1
            while i < mid:
                dst[k] = src[i]
                i += 1
                k += 1
            while j < hi:
                dst[k] = src[j]
                j += 1
                k += 1
        src, dst = dst, src
        width <<= 1
    return count


__all__ = ["invert", "is_permutation", "compose_inverse", "bucket_map", "count_inversions"]
