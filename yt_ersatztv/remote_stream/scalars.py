"""YAML scalar rendering for remote stream documents.

Only the small subset of YAML that ErsatzTV remote stream files use is
produced here, one ``key: value`` line (or block) at a time.
"""

from typing import Literal

BlockStyle = Literal["literal", "folded"]

BLOCK_INDICATORS = {"literal": "|", "folded": ">"}

BLOCK_INDENT = "  "

# Backslash must be first so later substitutions are not escaped twice
_QUOTED_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


def escape_quoted(value: str) -> str:
    """Escape text for use inside a double-quoted YAML scalar."""
    for char, replacement in _QUOTED_ESCAPES:
        value = value.replace(char, replacement)
    return value


def quoted_scalar(key: str, value: str) -> str:
    """Render ``key: "value"`` with escaping."""
    return f'{key}: "{escape_quoted(value)}"'


def block_scalar(key: str, value: str, style: BlockStyle) -> str:
    """Render a literal (``|``) or folded (``>``) block scalar.

    Every source line, blank ones included, is indented by two spaces.
    No trailing newline is added.
    """
    lines = [f"{BLOCK_INDENT}{line}" for line in value.split("\n")]
    return f"{key}: {BLOCK_INDICATORS[style]}\n" + "\n".join(lines)


def plain_scalar(key: str, value: str) -> str:
    """Render an unquoted ``key: value`` line.

    Booleans, durations and years must stay unquoted so ErsatzTV reads
    them with their native types.
    """
    return f"{key}: {value}"
