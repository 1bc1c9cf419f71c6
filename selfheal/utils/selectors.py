from __future__ import annotations

import re

_CSS_IDENT_SAFE = re.compile(r"[A-Za-z0-9_-]")


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def css_string(value: str) -> str:
    """Quotes an attribute value for use inside ``[attr="..."]``."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def css_identifier(value: str) -> str:
    """Escapes an id or class token the way ``CSS.escape`` does for common input."""

    parts: list[str] = []
    for index, char in enumerate(value):
        if index == 0 and char.isdigit():
            parts.append(f"\\{ord(char):x} ")
        elif index == 1 and char.isdigit() and value[0] == "-":
            parts.append(f"\\{ord(char):x} ")
        elif _CSS_IDENT_SAFE.match(char) or ord(char) > 0x7F:
            parts.append(char)
        else:
            parts.append(f"\\{char}")
    return "".join(parts)


def xpath_literal(value: str) -> str:
    """Builds an XPath 1.0 string literal, falling back to concat() for mixed quotes."""

    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    joined = ", '\"', ".join(f'"{piece}"' for piece in pieces)
    return f"concat({joined})"
