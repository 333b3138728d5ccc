"""Error context mapping for rendered templates.

A failure raised while building or running a render function is traced back
to the template line that caused it, and the exception message is rewritten
in place to show that line in context:

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

The exception object keeps its type and traceback; only its ``args`` change.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, NoReturn

from kiln.exceptions import build_source_snippet

if TYPE_CHECKING:
    from kiln._types import Source
    from kiln.compiler import GeneratedCode

logger = logging.getLogger(__name__)


def locate(error: BaseException, code: GeneratedCode | None) -> int | None:
    """Find the template line an exception was raised from.

    The failure is located by the innermost traceback frame executing the
    template's generated code, mapped through its line table. This holds
    for every exception type, including a `TemplateSyntaxError` raised by
    another template that embedded code tried to render.

    Returns:
        1-based template line, or None if the failure did not originate in
        the template.
    """
    if code is None:
        return None

    lineno: int | None = None
    for frame, frame_lineno in traceback.walk_tb(error.__traceback__):
        if frame.f_code.co_filename == code.filename and frame_lineno is not None:
            lineno = frame_lineno
    if lineno is None:
        return None
    return code.template_line(lineno)


def format_context(source: Source, lineno: int) -> str:
    """Header and source window for a failure on ``lineno``."""
    snippet = build_source_snippet(source.lines, lineno)
    return f"{source.name}:{lineno}\n{snippet.format()}"


def raise_with_context(
    error: Exception,
    source: Source,
    code: GeneratedCode | None = None,
    *,
    lineno: int | None = None,
) -> NoReturn:
    """Re-raise ``error`` with its template location prepended to the message.

    Args:
        error: The exception caught while compiling or rendering.
        source: Template source the failure belongs to.
        code: Generated code of the template, if it got that far.
        lineno: Template line already known to be at fault, as for
            compile-time errors. Skips the traceback search.

    Raises:
        The same exception object, annotated when its line could be found.
    """
    if lineno is None:
        lineno = locate(error, code)
    if lineno is None:
        logger.debug("No template frame for %s in %r", type(error).__name__, source.name)
        raise error

    context = format_context(source, lineno)
    if len(error.args) == 1 and isinstance(error.args[0], str):
        message = error.args[0]
    else:
        message = str(error)
    error.args = (f"{context}\n\n{message}",)

    logger.debug("Mapped %s to %s:%d", type(error).__name__, source.name, lineno)
    raise error
