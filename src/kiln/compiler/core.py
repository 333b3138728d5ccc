"""Kiln Compiler Core — main Compiler class.

The Compiler lowers the flat node stream into the Python source of one
coroutine function. Uses a mixin-based design like the parser side.

Design Principles:
1. **Source, not AST**: Embedded code is arbitrary Python, so the output is
   source text compiled later with `compile()`
2. **StringBuilder**: Output via `_kiln_append()`, join at end
3. **Line table**: Every generated line remembers its template line

Generated code for ``Hello <%= name %>!``:

    ```python
    async def render():
        _kiln_buf = []
        _kiln_append = _kiln_buf.append
        _kiln_append('Hello ')
        _kiln_append(_kiln_escape(name))
        _kiln_append('!')
        return ''.join(_kiln_buf)
    ```

Template data is not passed as an argument; the render function is bound to
fresh globals holding the data for every call (see `kiln.template`).

"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from kiln._types import Node, NodeKind
from kiln.compiler.expressions import ExpressionCompilationMixin
from kiln.compiler.statements import Frame, StatementCompilationMixin
from kiln.config import DEFAULT_NAME
from kiln.exceptions import ErrorCode, TemplateSyntaxError

logger = logging.getLogger(__name__)

INDENT = "    "

RENDER_FUNCTION = "render"


@dataclass(frozen=True, slots=True)
class GeneratedCode:
    """Python source of a render function plus its line table.

    Attributes:
        source: Source defining ``async def render():``.
        line_map: Template line for each generated line; entry ``i`` belongs
            to generated line ``i + 1``.
        filename: Synthetic filename the source is compiled under. Traceback
            frames carrying it come from this template.
    """

    source: str
    line_map: tuple[int, ...]
    filename: str

    def template_line(self, lineno: int) -> int:
        """Map a 1-based generated line to a 1-based template line."""
        if not self.line_map:
            return 1
        index = min(max(lineno, 1), len(self.line_map)) - 1
        return self.line_map[index]


class Compiler(ExpressionCompilationMixin, StatementCompilationMixin):
    """Compile a kiln node stream to Python source.

    Node Dispatch:
        Content nodes may span several lines when a tag stays open across
        line breaks. Their handlers fold the continuation nodes and return
        the index of the last node they consumed:

            ```python
            dispatch = {
                NodeKind.CODE: self._compile_code,
                NodeKind.ESCAPED_EXPRESSION: self._compile_expression,
                ...
            }
            ```

    Example:
            >>> from kiln.compiler import Compiler
            >>> from kiln.parser import parse_template
            >>> generated = Compiler("greeting").compile(parse_template(["Hi <%= name %>"]))
            >>> print(generated.source)
            async def render():
                _kiln_buf = []
                _kiln_append = _kiln_buf.append
                _kiln_append('Hi ')
                _kiln_append(_kiln_escape(name))
                return ''.join(_kiln_buf)

    """

    __slots__ = (
        "_filename",
        "_frames",
        "_lineno",
        "_lines",
        "_name",
    )

    def __init__(self, name: str = DEFAULT_NAME, filename: str | None = None):
        self._name = name
        self._filename = filename or f"<{name}>"
        self._frames: list[Frame] = []
        self._lineno = 1
        # (generated text without indentation applied, template line)
        self._lines: list[tuple[str, int]] = []

    def compile(self, nodes: Sequence[Node]) -> GeneratedCode:
        """Generate the render function for ``nodes``.

        Raises:
            TemplateSyntaxError: Block markers or code suites do not balance.
        """
        nodes = list(nodes)
        self._frames = []
        self._lineno = 1
        self._lines = []

        self._emit(f"async def {RENDER_FUNCTION}():", 1)
        self._frames.append(Frame("render"))
        self._emit("_kiln_buf = []", 1)
        self._emit("_kiln_append = _kiln_buf.append", 1)

        index = 0
        while index < len(nodes):
            node = nodes[index]
            kind = node.kind
            if kind is NodeKind.LINE_BREAK:
                self._lineno += 1
            elif kind is NodeKind.TEXT:
                self._compile_text(node)
            elif kind is NodeKind.CODE:
                index = self._compile_code(nodes, index)
            elif kind.is_expression:
                index = self._compile_expression(nodes, index)
            elif kind is NodeKind.BLOCK_START:
                self._compile_block_start(node)
            elif kind is NodeKind.BLOCK_END:
                self._compile_block_end(node)
            # COMMENT and TAG_END produce no code
            index += 1

        self._check_closed()
        # Line breaks advance past the final line
        last_line = max(self._lineno - 1, 1)
        self._emit("return ''.join(_kiln_buf)", last_line)

        source = "\n".join(text for text, _ in self._lines) + "\n"
        line_map = tuple(lineno for _, lineno in self._lines)
        logger.debug("Generated %d lines for template %r", len(line_map), self._name)
        return GeneratedCode(source, line_map, self._filename)

    def _emit(self, text: str, lineno: int) -> None:
        """Append one generated line at the current suite depth."""
        depth = len(self._frames)
        if self._frames:
            self._frames[-1].has_body = True
        self._lines.append((INDENT * depth + text, lineno))

    def _fold(self, nodes: list[Node], index: int) -> tuple[str, int]:
        """Join a content node with its continuations on following lines.

        A tag left open at the end of a line continues as a node of the same
        kind right after the LINE_BREAK. Returns the joined value and the
        index of the last node consumed; ``_lineno`` is advanced past every
        folded line break.
        """
        kind = nodes[index].kind
        parts = [nodes[index].value]
        while (
            index + 2 < len(nodes)
            and nodes[index + 1].kind is NodeKind.LINE_BREAK
            and nodes[index + 2].kind is kind
        ):
            parts.append(nodes[index + 2].value)
            index += 2
            self._lineno += 1
        return "\n".join(parts), index

    def _check_closed(self) -> None:
        frame = self._frames[-1]
        if frame.kind == "render":
            return
        if frame.kind == "block":
            message = f"Unclosed block '<{{{frame.name}}}>'"
        else:
            message = f"Unclosed '{frame.keyword}' suite, expected 'end'"
        raise TemplateSyntaxError(
            f"{message} in {self._name}",
            lineno=frame.lineno,
            name=self._name,
            code=ErrorCode.UNCLOSED_BLOCK,
        )
