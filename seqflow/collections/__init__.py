"""Collections layer — equality/hashing utilities and sequence helpers."""

from seqflow.collections.equality import (
    DEFAULT_COMPARER,
    DefaultComparer,
    EqualityComparer,
    KeyComparer,
    sequenced_equals,
    sequenced_hash,
    unsequenced_equals,
    unsequenced_hash,
)
from seqflow.collections.sequences import (
    append,
    clone_elements,
    distinct_by,
    except_element,
    except_where,
    flatten,
    max_by,
    min_by,
    prepend,
    try_select,
    where_not_null,
)

__all__ = [
    "DEFAULT_COMPARER",
    "DefaultComparer",
    "EqualityComparer",
    "KeyComparer",
    "sequenced_equals",
    "sequenced_hash",
    "unsequenced_equals",
    "unsequenced_hash",
    "append",
    "clone_elements",
    "distinct_by",
    "except_element",
    "except_where",
    "flatten",
    "max_by",
    "min_by",
    "prepend",
    "try_select",
    "where_not_null",
]
