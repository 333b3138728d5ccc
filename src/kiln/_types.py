"""Core value types shared by the parser, compiler and template runtime.

Node Stream:
    The parser produces a flat, document-ordered sequence of `Node` values.
    Reusable blocks are not nested in a tree; they are delimited by paired
    ``BLOCK_START``/``BLOCK_END`` markers and the compiler opens a new scope
    for each pair. Every physical source line ends with exactly one
    ``LINE_BREAK`` node, which is what keeps error line mapping exact.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_LINE_SPLIT_RE = re.compile(r"\r?\n")


class NodeKind(Enum):
    """Kinds of node in the parsed template stream."""

    TEXT = "text"
    CODE = "code"
    COMMENT = "comment"
    ESCAPED_EXPRESSION = "escape"
    RAW_EXPRESSION = "expression"
    BLOCK_START = "block_start"
    BLOCK_END = "block_end"
    LINE_BREAK = "line"
    TAG_END = "end"

    @property
    def is_content(self) -> bool:
        """True for kinds whose adjacent nodes merge by concatenating values."""
        return self in _CONTENT_KINDS

    @property
    def is_expression(self) -> bool:
        return self is NodeKind.ESCAPED_EXPRESSION or self is NodeKind.RAW_EXPRESSION


_CONTENT_KINDS = frozenset(
    {
        NodeKind.TEXT,
        NodeKind.CODE,
        NodeKind.COMMENT,
        NodeKind.ESCAPED_EXPRESSION,
        NodeKind.RAW_EXPRESSION,
    }
)


@dataclass(frozen=True, slots=True)
class Node:
    """One element of the parsed template.

    Attributes:
        kind: What the node represents.
        value: Literal text, Python source, or block name depending on kind.
        parameters: Declared parameter list of a ``BLOCK_START`` node.
    """

    kind: NodeKind
    value: str = ""
    parameters: str | None = None


@dataclass(frozen=True, slots=True)
class Source:
    """Template source lines plus the name used in diagnostics."""

    lines: tuple[str, ...]
    name: str

    @classmethod
    def from_text(cls, text: str, name: str) -> Source:
        """Split ``text`` on ``\\n`` or ``\\r\\n``; a lone ``\\r`` stays in the line."""
        return cls(tuple(_LINE_SPLIT_RE.split(text)), name)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
