"""
Record: a mapping with single-parent delegation.

A record stores its own fields locally and falls back to its delegate for
anything it does not hold itself. Lookup walks the delegation chain until a
record owns the key or the chain ends.

Read semantics:
- ``record[key]``: own field first, then each delegate in turn
- ``key in record``: true for own and inherited keys
- iteration, ``len()`` and equality: own enumerable keys only

Write semantics:
- ``record[key] = value`` always creates or replaces an own field,
  shadowing any inherited field of the same name
- ``record["__proto__"] = value`` rebinds the delegate unless the record
  holds an own data field named ``__proto__`` (see ``define()``)
- ``del record[key]`` removes an own field; inherited fields are untouched

Thread safety: NOT thread-safe for concurrent writes. Concurrent reads of
records nobody is writing to are safe.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import protochain.constants as constants
import protochain.errors as errors

_logger = _logging.getLogger(__name__)


class Record(_abc.MutableMapping[str, _typing.Any]):
    """
    A mutable mapping whose lookups fall through to a delegate record.

    Example:
        >>> base = Record(None, {"kind": "base"})
        >>> child = Record(base)
        >>> child["kind"]
        'base'
        >>> child["kind"] = "child"  # Shadows base["kind"]
        >>> child["kind"], base["kind"]
        ('child', 'base')
        >>> dict(child)  # Own keys only
        {'kind': 'child'}

    Args:
        delegate: Record to consult for keys this record does not own.
            None ends the chain.
        fields: Initial own fields, stored with ``define()`` so that a
            ``__proto__`` member is kept as plain data.
    """

    __slots__ = ("_fields", "_hidden", "_delegate")

    def __init__(
        self,
        delegate: Record | None = None,
        fields: _abc.Mapping[str, _typing.Any] | None = None,
    ) -> None:
        self._fields: dict[str, _typing.Any] = {}
        self._hidden: set[str] = set()
        self._delegate = delegate
        if fields:
            for key, value in fields.items():
                self.define(key, value)

    @property
    def delegate(self) -> Record | None:
        """The next record in the delegation chain, or None."""
        return self._delegate

    def define(self, key: str, value: _typing.Any, *, enumerable: bool = True) -> None:
        """
        Define an own data field without going through assignment.

        Unlike ``record[key] = value``, defining ``__proto__`` stores an
        ordinary field and leaves the delegate alone. This is how parsed
        payloads keep attacker-supplied ``__proto__`` members inert.

        Args:
            key: Field name.
            value: Field value.
            enumerable: If False, the field is hidden from iteration,
                ``len()``, equality and ``enumerable_keys()`` but still
                found by lookup.
        """
        self._fields[key] = value
        if enumerable:
            self._hidden.discard(key)
        else:
            self._hidden.add(key)

    def has_own(self, key: str) -> bool:
        """Check whether this record itself stores ``key`` (hidden or not)."""
        return key in self._fields

    def own_keys(self, *, include_hidden: bool = False) -> list[str]:
        """Return own keys in insertion order."""
        if include_hidden:
            return list(self._fields)
        return [key for key in self._fields if key not in self._hidden]

    def delegation_chain(self) -> _typing.Iterator[Record]:
        """Yield this record followed by each of its delegates."""
        record: Record | None = self
        while record is not None:
            yield record
            record = record._delegate

    def enumerable_keys(self) -> _typing.Iterator[str]:
        """
        Yield every enumerable key visible on this record.

        Own keys come first, then each delegate's, in chain order. A key is
        yielded once; an own field (even a hidden one) shadows the same
        name further up the chain.
        """
        seen: set[str] = set()
        for record in self.delegation_chain():
            for key in record._fields:
                if key in seen:
                    continue
                seen.add(key)
                if key not in record._hidden:
                    yield key

    def invoke(self, name: str, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        """
        Call a function found along the chain with this record bound first.

        Raises:
            KeyError: If no record in the chain has ``name``.
            TypeError: If the value found is not callable.
        """
        method = self[name]
        if not callable(method):
            raise TypeError(f"{name!r} is not callable on {self!r}")
        return method(self, *args, **kwargs)

    def _rebind(self, value: _typing.Any) -> None:
        """Apply a ``__proto__`` assignment."""
        if value is None or isinstance(value, Record):
            set_prototype_of(self, value)
        elif isinstance(value, _abc.Mapping):
            set_prototype_of(self, from_mapping(value))
        else:
            # Non-object values are ignored, as with the accessor they model
            return
        _logger.debug("Delegate rebound through %s assignment", constants.PROTO_KEY)

    def __getitem__(self, key: str) -> _typing.Any:
        """
        Look up ``key`` along the delegation chain.

        ``__proto__`` reads the delegate unless the record owns a data
        field of that name.

        Raises:
            KeyError: If no record in the chain has the key.
        """
        if key == constants.PROTO_KEY and key not in self._fields:
            return self._delegate
        for record in self.delegation_chain():
            if key in record._fields:
                return record._fields[key]
        raise KeyError(key)

    def __setitem__(self, key: str, value: _typing.Any) -> None:
        if key == constants.PROTO_KEY and key not in self._fields:
            self._rebind(value)
            return
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        """Remove an own field. Inherited fields cannot be deleted here."""
        del self._fields[key]
        self._hidden.discard(key)

    def __iter__(self) -> _typing.Iterator[str]:
        """Iterate over own enumerable keys."""
        return iter(self.own_keys())

    def __len__(self) -> int:
        return len(self._fields) - len(self._hidden)

    def __contains__(self, key: object) -> bool:
        """Check if key is owned or inherited."""
        if not isinstance(key, str):
            return False
        if key == constants.PROTO_KEY:
            return True
        return any(key in record._fields for record in self.delegation_chain())

    def __repr__(self) -> str:
        content = {key: self._fields[key] for key in self}
        if self._delegate is None:
            return f"Record({content!r}, delegate=None)"
        return f"Record({content!r})"

    def __eq__(self, other: object) -> bool:
        """Compare own enumerable content with any Mapping."""
        if isinstance(other, _abc.Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        """Not hashable."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")


ROOT = Record(None)
"""The shared default delegation root. Every record from ``create()``
delegates to it unless told otherwise."""


def create(proto: Record | None = ROOT, /, **fields: _typing.Any) -> Record:
    """
    Create a record delegating to ``proto``.

    Example:
        >>> base = create(kind="base")
        >>> obj = create(base)
        >>> obj["kind"]
        'base'
    """
    return Record(proto, fields)


def from_mapping(
    mapping: _abc.Mapping[str, _typing.Any],
    proto: Record | None = ROOT,
) -> Record:
    """Create a record whose own fields are a copy of ``mapping``."""
    return Record(proto, mapping)


def get_prototype_of(record: Record) -> Record | None:
    """Return the record's delegate."""
    return record.delegate


def set_prototype_of(record: Record, proto: Record | None) -> Record:
    """
    Rebind the record's delegate.

    Returns:
        The same record.

    Raises:
        TypeError: If ``proto`` is neither a Record nor None.
        DelegationCycleError: If ``proto`` already delegates to ``record``.
    """
    if proto is not None and not isinstance(proto, Record):
        raise TypeError(
            f"Delegate must be a Record or None, got {type(proto).__name__}"
        )
    if proto is not None and any(ancestor is record for ancestor in proto.delegation_chain()):
        raise errors.DelegationCycleError(
            f"Cyclic delegation: {proto!r} already delegates to {record!r}"
        )
    record._delegate = proto
    return record


def has_own(mapping: _abc.Mapping[str, _typing.Any], key: str) -> bool:
    """
    Check whether ``key`` is an own key of ``mapping``.

    Records answer from their local fields; any other mapping has no
    delegation, so every key it contains is its own.
    """
    if isinstance(mapping, Record):
        return mapping.has_own(key)
    return key in mapping
