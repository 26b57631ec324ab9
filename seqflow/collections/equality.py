"""Collections — order-sensitive and order-insensitive equality and hashing.

Four operations compare or fingerprint sized collections:

    sequenced_equals    same length, elementwise equal in order
    unsequenced_equals  same length, equal as multisets
    sequenced_hash      hash that changes when elements are reordered
    unsequenced_hash    hash that ignores element order

``None`` elements are ignored by all four, both for hashing and for
equality.  Element identity is decided by an :class:`EqualityComparer`;
:class:`KeyComparer` compares elements through an extracted equality key.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Hashable, Iterable
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)

_HASH_SEED = 397
_HASH_MULTIPLIER = 397


class EqualityComparer(Protocol[T_contra]):
    """Strategy deciding element identity for comparison and hashing.

    Implementations must keep ``hash`` consistent with ``equals``: elements
    that compare equal must hash equally.
    """

    def equals(self, a: T_contra, b: T_contra) -> bool: ...

    def hash(self, value: T_contra) -> int: ...


class DefaultComparer:
    """Compares with ``==`` and hashes with the builtin ``hash()``."""

    def equals(self, a: Any, b: Any) -> bool:
        return bool(a == b)

    def hash(self, value: Any) -> int:
        return hash(value)


class KeyComparer(Generic[T]):
    """Compares elements by the equality key that *key* extracts."""

    def __init__(self, key: Callable[[T], Hashable]) -> None:
        self._key = key

    def equals(self, a: T, b: T) -> bool:
        return bool(self._key(a) == self._key(b))

    def hash(self, value: T) -> int:
        return hash(self._key(value))


DEFAULT_COMPARER = DefaultComparer()


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _present(collection: Iterable[T] | None, name: str) -> list[T]:
    if collection is None:
        raise TypeError(f"{name} must be a collection, not None")
    return [element for element in collection if element is not None]


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------


def sequenced_equals(
    first: Collection[T],
    second: Collection[T],
    comparer: EqualityComparer[T] | None = None,
) -> bool:
    """Return True if both collections hold the same elements in the same order."""
    comparer = comparer or DEFAULT_COMPARER
    left = _present(first, "first")
    right = _present(second, "second")
    if len(left) != len(right):
        return False
    return all(comparer.equals(a, b) for a, b in zip(left, right))


def unsequenced_equals(
    first: Collection[T],
    second: Collection[T],
    comparer: EqualityComparer[T] | None = None,
) -> bool:
    """Return True if both collections hold the same elements in any order.

    Duplicates count: ``[1, 1, 2]`` and ``[1, 2, 2]`` are not equal.  The
    cheap :func:`unsequenced_hash` check runs first so that most unequal
    pairs are rejected without the multiset match.
    """
    comparer = comparer or DEFAULT_COMPARER
    left = _present(first, "first")
    right = _present(second, "second")
    if len(left) != len(right):
        return False
    if unsequenced_hash(left, comparer) != unsequenced_hash(right, comparer):
        return False

    # Bucket the right-hand side by hash; each match consumes one entry.
    buckets: dict[int, list[T]] = {}
    for element in right:
        buckets.setdefault(comparer.hash(element), []).append(element)

    for element in left:
        candidates = buckets.get(comparer.hash(element))
        if not candidates:
            return False
        for index, candidate in enumerate(candidates):
            if comparer.equals(element, candidate):
                del candidates[index]
                break
        else:
            return False
    return True


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def sequenced_hash(
    collection: Iterable[T],
    comparer: EqualityComparer[T] | None = None,
) -> int:
    """Hash the contents of *collection*. Reordering elements changes the hash.

    Each step folds ``hash = hash * 397 ^ element_hash``, wrapped to a signed
    32-bit integer.

    See also: :func:`sequenced_equals`.
    """
    comparer = comparer or DEFAULT_COMPARER
    result = _HASH_SEED
    for element in _present(collection, "collection"):
        result = _to_int32((result * _HASH_MULTIPLIER) ^ comparer.hash(element))
    return result


def unsequenced_hash(
    collection: Iterable[T],
    comparer: EqualityComparer[T] | None = None,
) -> int:
    """Hash the contents of *collection*. Reordering elements never changes the hash.

    See also: :func:`unsequenced_equals`.
    """
    comparer = comparer or DEFAULT_COMPARER
    result = _HASH_SEED
    for element in _present(collection, "collection"):
        result = _to_int32(result ^ comparer.hash(element))
    return result
