from __future__ import annotations


class SequenceDistanceError(ValueError):
    """Base class for inputs a sequence distance cannot be computed over."""


class LengthMismatch(SequenceDistanceError):
    """The two sequences have different lengths."""


class IncompatibleElements(SequenceDistanceError):
    """The sequences are not rearrangements of each other.

    Raised when ``b`` holds a value that never occurs in ``a``, or when some
    value occurs a different number of times in the two sequences.
    """


__all__ = ["SequenceDistanceError", "LengthMismatch", "IncompatibleElements"]
