"""
JSON payloads as records.

``parse_payload`` turns JSON object text into Records whose members are all
own data fields. A ``"__proto__"`` member becomes an ordinary field; parsing
never changes a delegate. Whether that field later does harm depends on how
the record is merged, which is what ``protochain.merge`` guards.

Example:
    >>> record = parse_payload('{"__proto__": {"polluted": "yes"}, "safe": 123}')
    >>> record.has_own("__proto__"), record["safe"]
    (True, 123)
    >>> "polluted" in record
    False
"""

import json as _json
import typing as _typing

import protochain.delegation as delegation
import protochain.errors as errors


def _record_from_pairs(pairs: list[tuple[str, _typing.Any]]) -> delegation.Record:
    # Later duplicates win, matching json.loads for dicts
    record = delegation.Record(delegation.ROOT)
    for key, value in pairs:
        record.define(key, value)
    return record


def parse_payload(text: str) -> delegation.Record:
    """
    Parse JSON object text into a Record delegating to the shared root.

    Nested objects become Records as well.

    Raises:
        PayloadError: If the text is not valid JSON or not a JSON object.
    """
    try:
        value = _json.loads(text, object_pairs_hook=_record_from_pairs)
    except _json.JSONDecodeError as e:
        raise errors.PayloadError(f"invalid JSON payload: {e}") from e
    except RecursionError as e:
        raise errors.PayloadError("payload is nested too deeply") from e

    if not isinstance(value, delegation.Record):
        raise errors.PayloadError(
            f"payload must be a JSON object, got {type(value).__name__}"
        )
    return value


def to_plain(value: _typing.Any) -> _typing.Any:
    """
    Convert Records (recursively) to plain dicts of their own enumerable keys.

    Lists are converted item by item; other values are returned unchanged.
    """
    if isinstance(value, delegation.Record):
        return {key: to_plain(value[key]) for key in value}
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    return value
