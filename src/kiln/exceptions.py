"""Exceptions for the kiln template system.

Exception Hierarchy:
TemplateError (base)
└── TemplateSyntaxError       # Generated render function could not be built

Runtime failures raised by embedded code are NOT wrapped. They keep their
own type and only have their message rewritten with the template location
(see `kiln.template.errors`), so callers can still ``except ValueError``
around ``render()``.

Error Messages:
Located failures read like this:

    ```
    template:6
        3| 123
        4| 456
        5|   %# This dies
     >> 6| % raise ValueError('oops!')
        7| %= 1 + 1
        8| test

    oops!
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for kiln template errors.

    Format: KL-{CATEGORY}-{NUMBER}
    Categories: PAR (block structure), TPL (generated code)
    """

    UNCLOSED_BLOCK = "KL-PAR-001"
    UNEXPECTED_END = "KL-PAR-002"

    SYNTAX_ERROR = "KL-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------

# Error context window: lines shown before and after the failing line
CONTEXT_BEFORE = 3
CONTEXT_AFTER = 2


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int

    def format(self) -> str:
        """Format the window with right-aligned numbers and a ``>>`` pointer."""
        if not self.lines:
            return ""
        width = len(str(self.lines[-1][0]))
        parts: list[str] = []
        for lineno, content in self.lines:
            marker = " >> " if lineno == self.error_line else "    "
            parts.append(f"{marker}{lineno:>{width}}| {content}")
        return "\n".join(parts)


def build_source_snippet(
    lines: Sequence[str],
    error_line: int,
    *,
    before: int = CONTEXT_BEFORE,
    after: int = CONTEXT_AFTER,
) -> SourceSnippet:
    """Build a SourceSnippet from template source lines.

    Args:
        lines: Template source, one entry per physical line.
        error_line: 1-based line number of the error.
        before: Number of lines to show before the error line.
        after: Number of lines to show after the error line.

    Returns:
        SourceSnippet clipped to the bounds of the document.
    """
    start = max(0, error_line - 1 - before)
    end = min(len(lines), error_line + after)
    window = tuple((i + 1, lines[i]) for i in range(start, end))
    return SourceSnippet(lines=window, error_line=error_line)


class TemplateError(Exception):
    """Base exception for all kiln template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None


class TemplateSyntaxError(TemplateError):
    """The template could not be turned into a render function.

    Raised on the first ``compile()``/``render()`` of a template, either
    because block markers or code suites do not balance, or because the
    embedded Python is itself not valid syntax.

    This is not a subclass of Python's `SyntaxError`: catch it or
    `TemplateError` around ``compile()`` and ``render()``. When the embedded Python is invalid, the
    original `SyntaxError` is available as ``__cause__``.

    Attributes:
        message: Error description, ending with ``in <template name>``.
        lineno: 1-based template line the failure points at, if known.
        name: Template name.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        if code is not None:
            self.code = code
        super().__init__(message)
