"""
Single-parent delegation for mappings.

Records look up missing keys along a chain of delegate records, the way
prototype-based objects do. RecordType adds constructors whose instances
share a prototype record.

Example:
    >>> import protochain.delegation as delegation
    >>> base = delegation.create(kind="base")
    >>> obj = delegation.create(base)
    >>> obj["kind"], obj.has_own("kind")
    ('base', False)
"""

from protochain.delegation._constructor import OBJECT, RecordType
from protochain.delegation._record import (
    ROOT,
    Record,
    create,
    from_mapping,
    get_prototype_of,
    has_own,
    set_prototype_of,
)

__all__ = [
    "OBJECT",
    "ROOT",
    "Record",
    "RecordType",
    "create",
    "from_mapping",
    "get_prototype_of",
    "has_own",
    "set_prototype_of",
]
