from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel


def is_valid_param(value: Any) -> bool:
    """
    Optional fields only go on the wire when they carry a value:
    None, "" and [] are dropped, and so are ids/ints <= 0.
    Booleans are always sent.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value > 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def json_body(
        root: str,
        fields: Optional[Mapping[str, Any]] = None,
        optional: Optional[Mapping[str, Any]] = None,
        extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Dict[str, Any]]:
    """Build a ``{root: {...}}`` request body.

    ``fields`` are always included (``None`` values excepted), ``optional``
    entries only when :func:`is_valid_param` accepts them, and ``extra`` is
    caller-supplied parameters merged first so explicit fields win.
    """
    inner: Dict[str, Any] = {}
    for k, v in (extra or {}).items():
        if v is not None:
            inner[k] = _plain(v)
    for k, v in (fields or {}).items():
        if v is not None:
            inner[k] = _plain(v)
    for k, v in (optional or {}).items():
        if is_valid_param(v):
            inner[k] = _plain(v)
    return {root: inner}


def dumps(body: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Serialize a body; non-ASCII text is escaped as \\uXXXX."""
    if body is None:
        return None
    return json.dumps(body, ensure_ascii=True, separators=(",", ":"))
