"""Line classifier for ``%``-prefixed directive lines.

A directive line is optional leading whitespace, a ``%``, an optional
discriminator and the rest of the line:

    ```
    % code            CODE
    %= expression     ESCAPED_EXPRESSION
    %== expression    RAW_EXPRESSION
    %# comment        COMMENT
    %% text           literal text starting with "%"
    ```

Only consulted while the parser is in text mode at the start of a line.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from kiln._types import NodeKind

LINE_RE = re.compile(r"(\s*)%(%|#|={1,2})?(.*)", re.DOTALL)

# Discriminator -> node kind; "%" (literal) is handled by the caller
DIRECTIVE_KINDS: dict[str | None, NodeKind] = {
    None: NodeKind.CODE,
    "#": NodeKind.COMMENT,
    "=": NodeKind.ESCAPED_EXPRESSION,
    "==": NodeKind.RAW_EXPRESSION,
}


class Directive(NamedTuple):
    """A classified directive line."""

    indent: str
    marker: str | None
    value: str

    @property
    def is_literal(self) -> bool:
        """``%%`` lines are output as text with one ``%`` removed."""
        return self.marker == "%"

    @property
    def kind(self) -> NodeKind:
        return DIRECTIVE_KINDS[self.marker]


def classify_line(line: str) -> Directive | None:
    """Return the directive on ``line``, or None for mixed content."""
    match = LINE_RE.fullmatch(line)
    if match is None:
        return None
    indent, marker, value = match.groups()
    return Directive(indent, marker, value)
