"""Expression and text compilation for the kiln compiler.

Escaped and raw expressions append their value to the output buffer:

    ```python
    _kiln_append(_kiln_escape(user.name))   # <%= user.name %>
    _kiln_append(_kiln_str(markup))         # <%== markup %>
    ```

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from kiln._types import NodeKind

if TYPE_CHECKING:
    from kiln._types import Node

# A statement terminator at the end of an expression is tolerated
_TRAILING_SEMICOLON_RE = re.compile(r";\s*$")

EXPRESSION_WRAPPERS = {
    NodeKind.ESCAPED_EXPRESSION: "_kiln_escape",
    NodeKind.RAW_EXPRESSION: "_kiln_str",
}


class ExpressionCompilationMixin:
    """Mixin for compiling text and expression nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _lineno: int

        # From Compiler core
        def _emit(self, text: str, lineno: int) -> None: ...
        def _fold(self, nodes: list[Node], index: int) -> tuple[str, int]: ...

    def _compile_text(self, node: Node) -> None:
        if node.value:
            self._emit(f"_kiln_append({node.value!r})", self._lineno)

    def _compile_expression(self, nodes: list[Node], index: int) -> int:
        """Compile a (possibly multi-line) expression; returns the last index used.

        Each physical line of the expression keeps its own template line, so
        a failure in the third line of a long ``<%= ... %>`` points there.
        """
        lineno = self._lineno
        wrapper = EXPRESSION_WRAPPERS[nodes[index].kind]
        value, index = self._fold(nodes, index)
        value = _TRAILING_SEMICOLON_RE.sub("", value).strip(" \t")
        if not value.strip():
            return index

        lines = value.split("\n")
        last = len(lines) - 1
        # A comment on the last line would swallow the closing parentheses
        if "#" in value:
            lines.append("")
        lines[0] = f"_kiln_append({wrapper}({lines[0]}"
        lines[-1] += "))"

        for offset, text in enumerate(lines):
            self._emit(text, lineno + min(offset, last))
        return index
