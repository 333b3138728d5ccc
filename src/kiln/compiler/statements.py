"""Statement compilation for the kiln compiler.

Embedded Python code cannot rely on its own indentation, because template
text sits between the statements. Suites are therefore tracked explicitly:

    ```
    % for item in items:          opens a suite (last token is ":")
      <li><%= item %></li>
    % else:                       closes the suite and opens a sibling
      <li>empty</li>
    % end                         closes the innermost suite
    ```

Leading whitespace on every code line is ignored. Statements are split into
logical lines with `tokenize`, so a bracketed expression may span several
physical lines of one tag.

Reusable blocks (``<{name(params)}>`` ... ``<{/name}>``) are suites too; they
become nested ``async def`` functions with their own output buffer.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import io
import tokenize
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from kiln.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from kiln._types import Node

# Statements that close the current suite and open a sibling one
DEDENT_KEYWORDS = frozenset({"elif", "else", "except", "finally"})

END_KEYWORD = "end"

_SKIPPED_TOKENS = frozenset(
    {
        tokenize.COMMENT,
        tokenize.NL,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.ENDMARKER,
    }
)


@dataclass(frozen=True, slots=True)
class Statement:
    """One logical line of embedded Python.

    Attributes:
        offset: Index of the first physical line within the code chunk.
        lines: Physical lines, leading whitespace removed.
        keyword: First token of the statement.
        opens_suite: True when the last significant token is ``:``.
        token_count: Number of significant tokens.
        complete: False when tokenization stopped inside this statement.
    """

    offset: int
    lines: tuple[str, ...]
    keyword: str | None = None
    opens_suite: bool = False
    token_count: int = 0
    complete: bool = True

    @property
    def is_end(self) -> bool:
        """A bare ``end``, optionally followed by a comment."""
        return self.complete and self.token_count == 1 and self.keyword == END_KEYWORD


def split_statements(code: str) -> list[Statement]:
    """Group a chunk of embedded code into logical statements.

    Blank and comment-only lines between statements are dropped. Incomplete
    code (an unclosed bracket or string) ends tokenization; the remaining
    lines are kept together as one statement so that ``compile()`` reports
    the real syntax error later.
    """
    lines = [line.lstrip() for line in code.split("\n")]
    statements: list[Statement] = []
    tokens: list[tokenize.TokenInfo] = []
    # Row after the last complete statement
    start = 0

    readline = io.StringIO("\n".join(lines) + "\n").readline
    try:
        for token in tokenize.generate_tokens(readline):
            if token.type == tokenize.NEWLINE:
                if tokens:
                    statements.append(_statement(lines, tokens, token.start[0]))
                tokens = []
                start = token.start[0]
            elif token.type not in _SKIPPED_TOKENS:
                tokens.append(token)
    except (tokenize.TokenError, SyntaxError):
        if tokens:
            start = tokens[0].start[0] - 1
        rest = tuple(lines[start:])
        if any(rest):
            keyword = tokens[0].string if tokens else None
            statements.append(Statement(start, rest, keyword=keyword, complete=False))

    return statements


def _statement(lines: list[str], tokens: list[tokenize.TokenInfo], row: int) -> Statement:
    first, last = tokens[0], tokens[-1]
    offset = first.start[0] - 1
    return Statement(
        offset,
        tuple(lines[offset:row]),
        keyword=first.string,
        opens_suite=last.type == tokenize.OP and last.string == ":",
        token_count=len(tokens),
    )


@dataclass(slots=True)
class Frame:
    """An open suite in the generated render function.

    Attributes:
        kind: ``render`` for the function body itself, ``code`` for suites
            opened by embedded Python, ``block`` for reusable blocks.
        keyword: Keyword that opened a code suite (``for``, ``case``, ...).
        name: Block name for ``block`` frames.
        lineno: Template line that opened the suite.
        has_body: Whether any statement has been emitted inside the suite.
    """

    kind: Literal["render", "code", "block"]
    keyword: str | None = None
    name: str | None = None
    lineno: int = 1
    has_body: bool = field(default=False)


class StatementCompilationMixin:
    """Mixin for compiling code nodes and reusable block markers.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _frames: list[Frame]
        _lineno: int
        _name: str

        # From Compiler core
        def _emit(self, text: str, lineno: int) -> None: ...
        def _fold(self, nodes: list[Node], index: int) -> tuple[str, int]: ...

    def _compile_code(self, nodes: list[Node], index: int) -> int:
        """Compile a (possibly multi-line) code node; returns the last index used."""
        lineno = self._lineno
        value, index = self._fold(nodes, index)

        for statement in split_statements(value):
            line = lineno + statement.offset
            if statement.is_end:
                self._close_code_suite(line)
            elif statement.keyword in DEDENT_KEYWORDS and statement.opens_suite:
                self._pop_code_suite(statement.keyword, line)
                self._open_code_suite(statement, line)
            elif statement.keyword == "case" and statement.opens_suite and self._in_case():
                self._pop_code_suite("case", line)
                self._open_code_suite(statement, line)
            elif statement.opens_suite:
                self._open_code_suite(statement, line)
            else:
                self._emit_statement(statement, line)

        return index

    def _compile_block_start(self, node: Node) -> None:
        """``<{name(params)}>`` opens ``async def name(params):``."""
        lineno = self._lineno
        self._emit(f"async def {node.value}({node.parameters or ''}):", lineno)
        self._frames.append(Frame("block", name=node.value, lineno=lineno))
        self._emit("_kiln_buf = []", lineno)
        self._emit("_kiln_append = _kiln_buf.append", lineno)

    def _compile_block_end(self, node: Node) -> None:
        """``<{/name}>`` returns the block's output marked as pre-escaped."""
        frame = self._frames[-1]
        if frame.kind != "block" or frame.name != node.value:
            raise TemplateSyntaxError(
                f"Unexpected '<{{/{node.value}}}>', {self._describe_close(frame)}"
                f" in {self._name}",
                lineno=self._lineno,
                name=self._name,
                code=ErrorCode.UNEXPECTED_END,
            )
        self._emit("return _kiln_safe(''.join(_kiln_buf))", self._lineno)
        self._frames.pop()

    def _emit_statement(self, statement: Statement, lineno: int) -> None:
        for i, text in enumerate(statement.lines):
            self._emit(text, lineno + i)

    def _open_code_suite(self, statement: Statement, lineno: int) -> None:
        self._emit_statement(statement, lineno)
        self._frames.append(Frame("code", keyword=statement.keyword, lineno=lineno))

    def _pop_code_suite(self, keyword: str, lineno: int) -> Frame:
        frame = self._frames[-1]
        if frame.kind != "code":
            raise TemplateSyntaxError(
                f"Unexpected '{keyword}', {self._describe_close(frame)} in {self._name}",
                lineno=lineno,
                name=self._name,
                code=ErrorCode.UNEXPECTED_END,
            )
        if not frame.has_body:
            self._emit("pass", lineno)
        return self._frames.pop()

    def _close_code_suite(self, lineno: int) -> None:
        frame = self._pop_code_suite(END_KEYWORD, lineno)
        # The last case of a match statement also closes the match
        if frame.keyword == "case" and self._frames[-1].keyword == "match":
            self._frames.pop()

    def _in_case(self) -> bool:
        frame = self._frames[-1]
        return frame.kind == "code" and frame.keyword == "case"

    @staticmethod
    def _describe_close(frame: Frame) -> str:
        if frame.kind == "block":
            return f"expected '<{{/{frame.name}}}>' for block opened on line {frame.lineno}"
        if frame.kind == "code":
            return f"expected 'end' for '{frame.keyword}' opened on line {frame.lineno}"
        return "nothing is open"
