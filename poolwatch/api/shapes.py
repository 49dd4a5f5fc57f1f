"""
Response Shapes
===============

Upstream providers wrap their entity lists in different envelopes, and they
change them without notice. Each shape parser below knows one envelope and
returns the candidate list (or None). They are tried in order; the first
one whose list contains at least one entry the caller accepts wins.

Known envelopes:
1. {"data": {"pools": [...]}} / {"data": {"pairs": [...]}}
2. {"data": [...]}
3. {"pools": [...]} / {"pairs": [...]}
4. [...]
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

LIST_KEYS = ("pools", "pairs")

ShapeParser = Callable[[Any], Optional[List[Any]]]


def nested_under_data(payload: Any) -> Optional[List[Any]]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict):
        for key in LIST_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return None


def data_is_list(payload: Any) -> Optional[List[Any]]:
    data = payload.get("data") if isinstance(payload, dict) else None
    return data if isinstance(data, list) else None


def top_level_field(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, dict):
        for key in LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    return None


def bare_array(payload: Any) -> Optional[List[Any]]:
    return payload if isinstance(payload, list) else None


SHAPE_PARSERS: Sequence[Tuple[str, ShapeParser]] = (
    ("data.pools", nested_under_data),
    ("data[]", data_is_list),
    ("pools", top_level_field),
    ("array", bare_array),
)


def extract_entities(
    payload: Any,
    accept: Callable[[Any], bool],
    parsers: Sequence[Tuple[str, ShapeParser]] = SHAPE_PARSERS,
) -> Tuple[List[dict], Optional[str]]:
    """
    Pull the entity list out of a decoded JSON payload.

    Args:
        payload: Decoded JSON (any type)
        accept: Returns True for an entry that looks like a usable entity
        parsers: Shape parsers in priority order

    Returns:
        (accepted entries, name of the matching shape), or ([], None) when
        no shape yields a usable entry.
    """
    for name, parser in parsers:
        candidates = parser(payload)
        if not candidates:
            continue
        accepted = [item for item in candidates if accept(item)]
        if accepted:
            failed = len(candidates) - len(accepted)
            if failed:
                logger.warning(f"Shape {name}: parsed {len(accepted)} entries, {failed} unusable")
            else:
                logger.debug(f"Shape {name}: parsed {len(accepted)} entries")
            return accepted, name
    return [], None


def describe_payload(payload: Any) -> str:
    """Short description of an unrecognised payload for diagnostics."""
    if isinstance(payload, dict):
        return f"object with keys {sorted(payload.keys())}"
    if isinstance(payload, list):
        return f"array of {len(payload)} items"
    return type(payload).__name__
