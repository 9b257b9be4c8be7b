"""
RecordType: constructors with a shared prototype record.

Every instance a RecordType creates delegates to the type's ``prototype``
record, so fields placed on the prototype are visible to all instances and
changes to it show up on existing instances too.

Example:
    >>> Person = RecordType("Person", lambda this, name: this.update(name=name))
    >>> Person.prototype["say"] = lambda this: f"Hi, I'm {this['name']}"
    >>> ada = Person("Ada")
    >>> ada.invoke("say")
    "Hi, I'm Ada"
    >>> ada["constructor"] is Person
    True
"""

from __future__ import annotations

import typing as _typing

import protochain.constants as constants
import protochain.delegation._record as _record

Initializer: _typing.TypeAlias = _typing.Callable[..., None]


class RecordType:
    """
    A named constructor producing records that delegate to its prototype.

    Args:
        name: Type name, used in repr.
        init: Called as ``init(record, *args, **kwargs)`` on each new
            instance. Without it, keyword arguments become own fields.
        parent: Parent type. The new prototype delegates to the parent's
            prototype and ``init`` falls back to the parent's.
        prototype: Use an existing record as the prototype instead of
            creating one.
    """

    __slots__ = ("_name", "_init", "_parent", "_prototype")

    def __init__(
        self,
        name: str,
        init: Initializer | None = None,
        *,
        parent: RecordType | None = None,
        prototype: _record.Record | None = None,
    ) -> None:
        self._name = name
        self._init = init
        self._parent = parent
        if prototype is None:
            prototype = _record.Record(parent.prototype if parent else _record.ROOT)
        prototype.define(constants.CONSTRUCTOR_KEY, self, enumerable=False)
        self._prototype = prototype

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> RecordType | None:
        return self._parent

    @property
    def prototype(self) -> _record.Record:
        """The record every instance delegates to."""
        return self._prototype

    def _initializer(self) -> Initializer | None:
        record_type: RecordType | None = self
        while record_type is not None:
            if record_type._init is not None:
                return record_type._init
            record_type = record_type._parent
        return None

    def __call__(self, *args: _typing.Any, **kwargs: _typing.Any) -> _record.Record:
        """Create an instance delegating to ``prototype``."""
        instance = _record.Record(self._prototype)
        init = self._initializer()
        if init is not None:
            init(instance, *args, **kwargs)
        elif args:
            raise TypeError(
                f"{self._name}() takes keyword fields only without an initializer"
            )
        else:
            instance.update(kwargs)
        return instance

    def extend(self, name: str, init: Initializer | None = None) -> RecordType:
        """Create a subtype whose prototype delegates to this prototype."""
        return RecordType(name, init, parent=self)

    def is_instance(self, record: _record.Record) -> bool:
        """Check whether ``prototype`` appears in the record's delegate chain."""
        delegate = record.delegate
        while delegate is not None:
            if delegate is self._prototype:
                return True
            delegate = delegate.delegate
        return False

    def __repr__(self) -> str:
        return f"RecordType({self._name!r})"


OBJECT = RecordType("Object", prototype=_record.ROOT)
"""Constructor of the shared root; ``create()["constructor"] is OBJECT``."""
