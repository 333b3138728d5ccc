"""Kiln Template — source text compiled into an async render function.

Architecture:
    ```
    Template
    ├── _source: Source                 # Lines + name for error windows
    ├── _escape: callable               # Bound as _kiln_escape
    ├── _code: GeneratedCode | None     # Python source + line table
    └── _render_code: code object       # Body of async def render()
    ```

Compilation is lazy and happens once, on the first ``compile()`` or
``render()``. Every render instantiates a new function object from the
cached code object, bound to globals that hold the template data:

    ```python
    namespace = {"__builtins__": builtins, **data, **helpers}
    render = types.FunctionType(render_code, namespace)
    result = await render()
    ```

Template data therefore shows up as plain names inside the template, and
concurrent renders of the same Template never share state.

"""

from __future__ import annotations

import builtins
import itertools
import logging
import sys
import types
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from kiln._types import Source
from kiln.compiler import Compiler, GeneratedCode
from kiln.compiler.core import RENDER_FUNCTION
from kiln.config import DEFAULT_NAME, resolve_debug
from kiln.exceptions import ErrorCode, TemplateSyntaxError
from kiln.parser import parse_template
from kiln.template.errors import raise_with_context
from kiln.utils.html import Markup, xml_escape

logger = logging.getLogger(__name__)

# Distinguishes the frames of one template from those of every other
_template_ids = itertools.count(1)


class Template:
    """Template ready for rendering.

    Attributes:
        name: Template identifier used in error messages.
        source: Original template text.
        code: Generated Python source with line table (compiles on access).

    Options:
        escape: Function applied to ``<%= %>`` values. Defaults to
            `xml_escape`.
        name: Diagnostic name. Defaults to ``"template"``.
        debug: Dump the generated source to stderr when compiling. None
            uses the ``KILN_TEMPLATE_DEBUG`` environment variable.

    Example:
            >>> t = Template("Hello <%= name %>!")
            >>> await t.render(name="<World>")
            'Hello &lt;World&gt;!'

            >>> fn = t.compile()  # same object on every call
            >>> await fn({"name": "you"})
            'Hello you!'

            >>> copy = Template(t, name="greeting")  # shares source and escape

    """

    __slots__ = (
        "_code",
        "_debug",
        "_escape",
        "_filename",
        "_render_code",
        "_render_fn",
        "_source",
    )

    def __init__(
        self,
        template: str | Template,
        *,
        escape: Callable[[Any], str] | None = None,
        name: str | None = None,
        debug: bool | None = None,
    ):
        if isinstance(template, Template):
            # Copy constructor: unspecified options come from the original
            text = template.source
            escape = escape or template._escape
            name = name or template.name
            debug = template._debug if debug is None else debug
        else:
            text = template

        self._source = Source.from_text(text, name or DEFAULT_NAME)
        self._escape: Callable[[Any], str] = escape or xml_escape
        self._debug = resolve_debug(debug)
        self._filename = f"<kiln-template {next(_template_ids)}: {self._source.name}>"
        self._code: GeneratedCode | None = None
        self._render_code: types.CodeType | None = None
        self._render_fn: Callable[..., Awaitable[str]] | None = None

    @property
    def name(self) -> str:
        """Template name."""
        return self._source.name

    @property
    def source(self) -> str:
        """Template text with line endings normalized to ``\\n``."""
        return self._source.text

    @property
    def code(self) -> GeneratedCode:
        """Generated Python source of the render function."""
        self.compile()
        assert self._code is not None
        return self._code

    def compile(self) -> Callable[..., Awaitable[str]]:
        """Build the render function now instead of on first render.

        Returns:
            Coroutine function taking the same arguments as `render`. Every
            call returns the same object.

        Raises:
            TemplateSyntaxError: The template cannot be turned into valid
                Python. The message shows the offending template line.
        """
        if self._render_fn is None:
            try:
                self._render_code = self._compile_fn()
            except TemplateSyntaxError as e:
                raise_with_context(e, self._source, lineno=e.lineno)
            self._render_fn = self.render
        return self._render_fn

    def _compile_fn(self) -> types.CodeType:
        name = self.name
        self._code = Compiler(name, self._filename).compile(parse_template(self._source.lines))

        if self._debug:
            sys.stderr.write(f"-- Template ({name})\n{self._code.source}")

        try:
            module = compile(self._code.source, self._filename, "exec")
        except SyntaxError as e:
            lineno = self._code.template_line(e.lineno or 1)
            raise TemplateSyntaxError(
                f"{e.msg} in {name}",
                lineno=lineno,
                name=name,
                code=ErrorCode.SYNTAX_ERROR,
            ) from e

        namespace: dict[str, Any] = {"__builtins__": builtins}
        exec(module, namespace)
        logger.debug(
            "Compiled template %r (%d generated lines)", name, len(self._code.line_map)
        )
        return namespace[RENDER_FUNCTION].__code__

    async def render(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Render the template.

        Args:
            data: Values made available as names inside the template.
            **kwargs: More values; they win over keys of ``data``.

        Returns:
            Rendered output.

        Raises:
            TemplateSyntaxError: The template could not be compiled.
            Exception: Whatever embedded code raised, with the template
                location prepended to its message.
        """
        self.compile()
        assert self._render_code is not None

        namespace: dict[str, Any] = {"__builtins__": builtins}
        if data:
            namespace.update(data)
        namespace.update(kwargs)
        namespace.update(self._helpers())

        render_fn = types.FunctionType(self._render_code, namespace, RENDER_FUNCTION)
        try:
            result: str = await render_fn()
        except Exception as e:
            raise_with_context(e, self._source, self._code)
        return result

    def _helpers(self) -> dict[str, Any]:
        return {
            "_kiln_escape": self._escape,
            "_kiln_safe": Markup,
            "_kiln_str": str,
        }

    def __repr__(self) -> str:
        return f"<Template {self.name}>"


async def render(
    template: str | Template,
    data: Mapping[str, Any] | None = None,
    *,
    escape: Callable[[Any], str] | None = None,
    name: str | None = None,
    debug: bool | None = None,
) -> str:
    """Compile ``template`` and render it once.

    Example:
            >>> await render("<%= a + b %>", {"a": 1, "b": 2})
            '3'
    """
    return await Template(template, escape=escape, name=name, debug=debug).render(data)
