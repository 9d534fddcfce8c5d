"""Identity resolution — a stable base id for every source feature.

An explicit ``id`` is used verbatim (stringified).  Without one, or when
``remove_id`` is set, the base id is the SHA-1 of the feature's canonical
JSON: keys sorted, compact separators, UTF-8.  The same structure always
hashes to the same id, across calls and across processes.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


def content_hash(feature: Mapping[str, object]) -> str:
    """Return the hex SHA-1 digest of *feature*'s canonical JSON form."""
    canonical = json.dumps(
        feature,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha1(canonical.encode("utf-8"), usedforsecurity=False).hexdigest()


def strip_id(feature: Mapping[str, object], remove_id: bool) -> dict[str, object]:
    """Return a shallow copy of *feature*, without ``id`` when *remove_id* is set."""
    stripped = dict(feature)
    if remove_id:
        stripped.pop("id", None)
    return stripped


def resolve_base_id(feature: Mapping[str, object], remove_id: bool = False) -> str:
    """Derive the base identifier for a source feature.

    ``None`` and ``""`` count as no id.  The input mapping is not mutated.
    """
    candidate = strip_id(feature, remove_id)
    feature_id = candidate.get("id")
    if feature_id is not None and feature_id != "":
        return str(feature_id)
    return content_hash(candidate)
