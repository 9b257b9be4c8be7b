"""
protochain - prototype delegation and safe merging

Records that delegate lookups along a single-parent chain, and a merge
utility that copies untrusted key/value mappings into a target without
letting reserved keys rebind delegates or constructors.

Any mapping built from untrusted input must reach its target through
``safe_merge``.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("protochain")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "protochain Contributors"

from protochain.constants import RESERVED_KEYS  # noqa: E402
from protochain.delegation import Record, RecordType, create  # noqa: E402
from protochain.merge import safe_merge  # noqa: E402
from protochain.payload import parse_payload  # noqa: E402

__all__ = [
    "RESERVED_KEYS",
    "Record",
    "RecordType",
    "__version__",
    "__version_info__",
    "create",
    "parse_payload",
    "safe_merge",
]
