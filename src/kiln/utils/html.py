"""XML escaping and the pre-escaped marker type.

``xml_escape`` is the default escape function of every template. Values that
implement the ``__html__`` protocol (``Markup``, or markup types from other
libraries) are trusted and passed through unescaped.

Complexity:
    ``xml_escape()`` is O(n), a single pass via ``str.translate()``.

"""

from __future__ import annotations

from typing import Any

_XML_ESCAPE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


class Markup(str):
    """A string that is already safe for output.

    Reusable template blocks return ``Markup`` so that embedding their result
    with ``<%= %>`` does not escape it a second time.

    Example:
        >>> xml_escape(Markup("<p>"))
        '<p>'
        >>> xml_escape("<p>")
        '&lt;p&gt;'
    """

    __slots__ = ()

    def __html__(self) -> str:
        return str(self)

    def __repr__(self) -> str:
        return f"Markup({super().__repr__()})"


def xml_escape(value: Any) -> str:
    """Escape ``& < > " '`` in the string form of ``value``.

    Non-string values (including None) are converted with ``str()`` first.
    """
    html = getattr(value, "__html__", None)
    if html is not None:
        return str(html())
    if not isinstance(value, str):
        value = str(value)
    return value.translate(_XML_ESCAPE)
