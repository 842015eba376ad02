import numpy as np
import pytest

from errors import IncompatibleElements
from relabel import HashRelabeler, Relabeler, SortRelabeler, byte_views, get_relabeler


class Opaque:
    """Hashable, but with no ordering."""

    def __init__(self, v):
        self.v = v

    def __eq__(self, other):
        return isinstance(other, Opaque) and self.v == other.v

    def __hash__(self):
        return hash(self.v)


def relabeled(relabeler, a, b):
    labels_a, labels_b, k = relabeler.relabel(a, b)
    return labels_a.tolist(), labels_b.tolist(), k


def test_hash_labels_follow_first_appearance():
    assert relabeled(HashRelabeler(), [5, 3, 5, 9], [9, 5, 3, 5]) == ([0, 1, 0, 2], [2, 0, 1, 0], 3)


def test_sort_labels_follow_rank():
    assert relabeled(SortRelabeler(), [5, 3, 5, 9], [9, 5, 3, 5]) == ([1, 0, 1, 2], [2, 1, 0, 1], 3)


@pytest.mark.parametrize("relabeler", [HashRelabeler(), SortRelabeler()])
def test_empty(relabeler):
    assert relabeled(relabeler, [], []) == ([], [], 0)


@pytest.mark.parametrize("relabeler", [HashRelabeler(), SortRelabeler()])
@pytest.mark.parametrize(
    "a,b",
    [
        ([1, 2, 3], [1, 2, 4]),
        ("abc", "abd"),
        (np.array([1.5, 2.5]), np.array([2.5, 3.5])),
        (np.array([1, 2, 3], dtype=np.int32), np.array([3, 2, 0], dtype=np.int32)),
        (b"abc", b"abz"),
        (np.array(["x", "y"]), np.array(["y", "z"])),
    ],
)
def test_unknown_element(relabeler, a, b):
    with pytest.raises(IncompatibleElements, match="does not occur in a"):
        relabeler.relabel(a, b)


@pytest.mark.parametrize("relabeler", [HashRelabeler(), SortRelabeler()])
def test_label_count_is_distinct_values_of_a(relabeler):
    _, labels_b, k = relabeler.relabel("abcdaabb", "dcbababa")
    assert k == 4
    assert set(labels_b.tolist()) == {0, 1, 2, 3}


@pytest.mark.parametrize("relabeler", [HashRelabeler(), SortRelabeler()])
def test_numpy_and_list_agree(relabeler):
    a = [4, -2, 4, 7, -2]
    b = [7, 4, -2, -2, 4]
    assert relabeled(relabeler, np.array(a), np.array(b)) == relabeled(relabeler, a, b)


def test_byte_fast_path_matches_general_path():
    a = bytes([200, 3, 200, 0, 17])
    b = bytes([0, 17, 3, 200, 200])
    assert relabeled(HashRelabeler(), a, b) == relabeled(HashRelabeler(), list(a), list(b))


def test_byte_fast_path_booleans():
    a = np.array([True, True, False])
    b = np.array([False, True, True])
    assert relabeled(HashRelabeler(), a, b) == ([0, 0, 1], [1, 0, 0], 2)


def test_byte_views():
    va, vb = byte_views(b"ab", bytearray(b"ba"))
    assert va.tolist() == [97, 98]
    assert vb.tolist() == [98, 97]
    va, vb = byte_views(np.array([-1, 2], dtype=np.int8), np.array([2, -1], dtype=np.int8))
    assert va.tolist() == [255, 2]
    assert byte_views(memoryview(b"ab"), b"ba")[0].tolist() == [97, 98]
    assert byte_views(np.array([1, 2], dtype=np.int16), np.array([2, 1], dtype=np.int16)) is None
    assert byte_views([1, 2], [2, 1]) is None
    assert byte_views("ab", "ba") is None


@pytest.mark.parametrize(
    "a,b",
    [
        (np.array([1, 2], dtype=np.int8), np.array([1, 2], dtype=np.uint8)),
        (b"\x01\x02", np.array([2, 1], dtype=np.uint8)),
        (np.array([True, False]), np.array([0, 1], dtype=np.int8)),
    ],
)
def test_mixed_byte_kinds_skip_the_table(a, b):
    assert byte_views(a, b) is None


@pytest.mark.parametrize(
    "a,b",
    [
        (np.array([-1, 5], dtype=np.int8), np.array([5, 255], dtype=np.uint8)),
        (b"\xff\x05", np.array([5, -1], dtype=np.int8)),
        (np.array([5, -1], dtype=np.int8), b"\x05\xff"),
    ],
)
def test_signed_and_unsigned_bytes_are_different_values(a, b):
    for relabeler in (HashRelabeler(), SortRelabeler()):
        with pytest.raises(IncompatibleElements):
            relabeler.relabel(a, b)


def test_memoryview_input():
    assert relabeled(HashRelabeler(), memoryview(b"aba"), memoryview(b"baa")) == ([0, 1, 0], [1, 0, 0], 2)


def test_hash_needs_no_order():
    a = [Opaque(1), Opaque(2), Opaque(1)]
    b = [Opaque(2), Opaque(1), Opaque(1)]
    assert relabeled(HashRelabeler(), a, b) == ([0, 1, 0], [1, 0, 0], 2)


def test_sort_rejects_unorderable_elements():
    a = [Opaque(1), Opaque(2)]
    with pytest.raises(TypeError):
        SortRelabeler().relabel(a, list(a))


def test_hash_rejects_unhashable_elements():
    with pytest.raises(TypeError):
        HashRelabeler().relabel([[1], [2]], [[2], [1]])


def test_sort_needs_no_hash():
    a = [[2, 1], [1], [2, 1]]
    b = [[1], [2, 1], [2, 1]]
    assert relabeled(SortRelabeler(), a, b) == ([1, 0, 1], [0, 1, 1], 2)


def test_sort_incomparable_b_element_is_unknown():
    with pytest.raises(IncompatibleElements):
        SortRelabeler().relabel([1, 2, 3], [1, 2, "3"])


def test_get_relabeler():
    assert isinstance(get_relabeler("hash"), HashRelabeler)
    assert isinstance(get_relabeler("sort"), SortRelabeler)
    r = SortRelabeler()
    assert get_relabeler(r) is r
    with pytest.raises(ValueError, match="unknown relabeling strategy"):
        get_relabeler("bogus")


def test_relabeler_is_abstract():
    with pytest.raises(TypeError):
        Relabeler()
