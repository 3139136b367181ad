"""
jq queries over a runtime snapshot.

Callers write paths without the leading dot ("kairos.version", "oem | .found").
Every value the program emits is stringified and the pieces are joined with
no separator; consumers that want several values apart must ask jq for that.
"""

import json
from typing import Any, List

import jq

from .errors import QueryError
from .logging import get_logger
from .renderers import to_mapping
from .schema import Runtime

log = get_logger("query")


def stringify(value: Any) -> str:
    """Text form of one emitted value."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def query(runtime: Runtime, path: str) -> str:
    """Run ``.<path>`` against the snapshot. Raises QueryError on bad syntax or a jq runtime error."""
    expression = f".{path}"
    try:
        program = jq.compile(expression)
    except ValueError as e:
        raise QueryError(expression, str(e)) from e

    out: List[str] = []
    try:
        for value in program.input_value(to_mapping(runtime)):
            out.append(stringify(value))
    except ValueError as e:
        raise QueryError(expression, str(e)) from e
    log.trace("{} -> {} values", expression, len(out))
    return "".join(out)
