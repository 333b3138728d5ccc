"""Template strings (PEP 750) as template sources.

``tmpl`` builds a `Template` from a plain string or from a Python 3.14+
t-string. Interpolated values become part of the template *source*, so they
can contribute tags of their own:

    >>> expr = "1 + 1"
    >>> await tmpl(t"<%= {expr} %>").render()
    '2'
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from kiln.template import Template


@runtime_checkable
class TemplateProtocol(Protocol):
    strings: tuple[str, ...]
    interpolations: tuple[Any, ...]


def tmpl(source: str | TemplateProtocol, **options: Any) -> Template:
    """Create a Template from a string or t-string.

    Args:
        source: Template text, or any object shaped like
            ``string.templatelib.Template``.
        **options: Passed on to `Template` (``escape``, ``name``, ``debug``).
    """
    if isinstance(source, str):
        return Template(source, **options)
    # Structural check: tests pass SimpleNamespace stand-ins on older Pythons
    if not isinstance(source, TemplateProtocol):
        raise TypeError("tmpl() expects a str or a string.templatelib.Template")

    strings = source.strings
    interpolations = source.interpolations
    parts: list[str] = []

    for i in range(len(strings)):
        parts.append(strings[i])
        if i < len(interpolations):
            parts.append(str(interpolations[i].value))

    return Template("".join(parts), **options)
