"""Collections — small lazy helpers over iterables."""

from __future__ import annotations

import copy
import itertools
from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import Any, TypeVar

from seqflow.collections.equality import KeyComparer

T = TypeVar("T")
R = TypeVar("R")


def except_where(elements: Iterable[T], predicate: Callable[[T], bool]) -> Iterator[T]:
    """Yield the elements that do *not* match *predicate*."""
    return (element for element in elements if not predicate(element))


def except_element(elements: Iterable[T], element: T) -> Iterator[T]:
    """Yield every element that does not compare equal to *element*."""
    return (candidate for candidate in elements if candidate != element)


def where_not_null(elements: Iterable[T | None]) -> Iterator[T]:
    return (element for element in elements if element is not None)


def distinct_by(elements: Iterable[T], key: Callable[[T], Hashable]) -> Iterator[T]:
    """Yield the first element seen for each equality key, in input order."""
    comparer = KeyComparer(key)
    seen: dict[int, list[T]] = {}
    for element in elements:
        bucket = seen.setdefault(comparer.hash(element), [])
        if any(comparer.equals(element, other) for other in bucket):
            continue
        bucket.append(element)
        yield element


def try_select(
    elements: Iterable[T],
    selector: Callable[[T], R],
    exceptions: type[BaseException] | tuple[type[BaseException], ...],
) -> Iterator[R]:
    """Map *elements* through *selector*, skipping those that raise *exceptions*.

    Any other exception raised by *selector* propagates to the consumer.
    """
    for element in elements:
        try:
            result = selector(element)
        except exceptions:
            continue
        yield result


def max_by(elements: Iterable[T], key: Callable[[T], Any]) -> T | None:
    """Return the element with the largest key, or None for empty input."""
    return max(elements, key=key, default=None)


def min_by(elements: Iterable[T], key: Callable[[T], Any]) -> T | None:
    """Return the element with the smallest key, or None for empty input."""
    return min(elements, key=key, default=None)


def append(elements: Iterable[T], element: T) -> Iterator[T]:
    return itertools.chain(elements, (element,))


def prepend(elements: Iterable[T], element: T) -> Iterator[T]:
    return itertools.chain((element,), elements)


def flatten(iterables: Iterable[Iterable[T]]) -> Iterator[T]:
    """Concatenate a sequence of sequences, one level deep."""
    return itertools.chain.from_iterable(iterables)


def clone_elements(elements: Iterable[T]) -> Iterator[T]:
    """Yield a shallow copy of every element.

    Objects that implement ``__copy__`` control what the copy holds.
    """
    return (copy.copy(element) for element in elements)
