"""
Safe merge of untrusted key/value mappings.

``safe_merge`` copies the own keys of a source mapping into a target,
skipping reserved keys that could rebind the target's delegate or replace
its constructor reference. Inherited keys of the source are never read.

Usage convention: any mapping built from untrusted input (request bodies,
parsed payloads, config files) must reach a target through ``safe_merge``.
A plain ``for key in source: target[key] = source[key]`` loop, or one that
walks inherited keys as well, is never acceptable on those paths.

Example:
    >>> import protochain.payload as payload
    >>> target = {}
    >>> safe_merge(target, payload.parse_payload('{"safe": 1, "__proto__": {"x": 2}}'))
    {'safe': 1}
"""

import collections.abc as _abc
import logging as _logging
import typing as _typing

import protochain.constants as constants

_logger = _logging.getLogger(__name__)

_TargetT = _typing.TypeVar("_TargetT", bound=_abc.MutableMapping[str, _typing.Any])

RESERVED_KEYS = constants.RESERVED_KEYS


def reserved_keys_from(extra: _abc.Iterable[str] = ()) -> frozenset[str]:
    """
    Build a blocklist from the default reserved keys plus ``extra``.

    The defaults are always included; ``extra`` can only widen the set.
    """
    return RESERVED_KEYS | frozenset(extra)


def is_reserved(
    key: str,
    reserved_keys: _abc.Set[str] = RESERVED_KEYS,
    *,
    fold_case: bool = False,
) -> bool:
    """
    Check whether ``key`` is blocked.

    Args:
        key: Key to check.
        reserved_keys: Blocklist to check against. The default reserved
            keys are blocked even if missing from this set.
        fold_case: Also block case variants such as ``__PROTO__``.
    """
    blocked = reserved_keys_from(reserved_keys)
    if key in blocked:
        return True
    if fold_case and isinstance(key, str):
        folded = key.casefold()
        return any(folded == reserved.casefold() for reserved in blocked)
    return False


def safe_merge(
    target: _TargetT,
    source: _abc.Mapping[str, _typing.Any],
    *,
    reserved_keys: _abc.Set[str] = RESERVED_KEYS,
    fold_case: bool = False,
) -> _TargetT:
    """
    Copy the own, non-reserved keys of ``source`` into ``target``.

    Existing values in ``target`` are overwritten. Reserved keys are
    skipped without error. ``source`` is only read. For a Record source
    only its own enumerable keys are copied, never inherited ones.

    Args:
        target: Mapping to update in place.
        source: Mapping to copy from. May be empty.
        reserved_keys: Keys never written to ``target``. The default
            reserved keys are blocked even if missing from this set.
        fold_case: Also skip case variants of reserved keys.

    Returns:
        ``target`` itself, for chaining.
    """
    blocked = reserved_keys_from(reserved_keys)
    # Iterating a Mapping yields its own keys; Records never yield inherited ones
    for key in source:
        if is_reserved(key, blocked, fold_case=fold_case):
            _logger.debug("Skipping reserved key %r", key)
            continue
        target[key] = source[key]
    return target
