"""
Renderers turn a Runtime into output: indented key/value text for people and
a plain mapping for the query engine. Both use the snapshot's serialized keys.
"""

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jinja2 import Environment, TemplateError

from ..logging import get_logger
from ..schema import Runtime

log = get_logger("render")

INDENT = "    "

TEXT_TEMPLATE = """\
{% for depth, key, leaf, value in lines %}
{{ indent * depth }}{{ key }}:{% if leaf %} {{ value | scalar }}{% endif %}{{ "\\n" }}
{%- endfor %}
"""

# Strings that can be written unquoted and still read back as the same string.
_PLAIN_SCALAR = re.compile(r"^[A-Za-z_/][\w./@+-]*( [\w./@+()-]+)*$")
_RESERVED = frozenset({"true", "false", "yes", "no", "on", "off", "null", "y", "n"})


def to_mapping(runtime: Runtime) -> Dict[str, Any]:
    """Snapshot as plain JSON types, keyed like the text rendering."""
    return runtime.model_dump(mode="json", by_alias=True)


def scalar(value: Any) -> str:
    """Render a leaf value for the text form."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        if _PLAIN_SCALAR.match(value) and value.lower() not in _RESERVED:
            return value
        return json.dumps(value)
    # lists and empty mappings, flow style
    return json.dumps(value, separators=(", ", ": "))


def _lines(mapping: Dict[str, Any], depth: int = 0) -> Iterator[Tuple[int, str, bool, Any]]:
    for key, value in mapping.items():
        if isinstance(value, dict) and value:
            yield depth, key, False, None
            yield from _lines(value, depth + 1)
        else:
            yield depth, key, True, value


def make_environment() -> Environment:
    env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True, autoescape=False)
    env.filters["scalar"] = scalar
    return env


def render_text(runtime: Runtime, env: Optional[Environment] = None) -> str:
    """Indented key/value rendering of every field, in schema order. Empty string on failure."""
    env = env or make_environment()
    lines: List[Tuple[int, str, bool, Any]] = list(_lines(to_mapping(runtime)))
    try:
        return env.from_string(TEXT_TEMPLATE).render(lines=lines, indent=INDENT)
    except TemplateError as e:
        log.error("cannot render snapshot: {}", e)
        return ""
