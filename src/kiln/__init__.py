"""Kiln — embedded Python templates with async rendering.

Templates mix literal text with Python code, in the style of ERB and EJS.

Quickstart:
    >>> from kiln import Template
    >>> template = Template("Hello <%= name %>!")
    >>> await template.render(name="World")
    'Hello World!'

Syntax:
    ```
    <% code %>          Python statement(s)
    <%= expr %>         Escaped expression
    <%== expr %>        Raw expression
    <%# comment %>      Comment
    <%% / %%            Literal "<%" / "%" at line start
    % code              Whole-line forms of the above (also %=, %==, %#)
    ... =%>             Trim the line break after the tag
    <{name(args)}>      Start of a reusable block, closed by <{/name}>
    ```

Python suites are closed with ``end``; indentation inside templates is
ignored:

    ```
    % for item in items:
      <li><%= item %></li>
    % end
    ```

Data keys are globals of the render function, and names assigned in a
template are its locals. Assigning to a data name therefore hides the data
value for the whole template; derive new names instead:

    ```
    % shout = name.upper()     not: % name = name.upper()
    ```

Architecture:
Template Source → Parser (node stream) → Compiler (Python source) → compile()

Pipeline stages:
1. **Parser**: Classifies lines and splits tags into a flat node stream
2. **Compiler**: Lowers nodes into the source of ``async def render()``
3. **Template**: Compiles once, binds data as globals on every render and
   maps failures back to template lines

Rendering is a coroutine so that embedded code can ``await``. Blocks are
``async`` functions too and return pre-escaped `Markup`:

    >>> await Template("<{hi(name)}>Hi <%= name %><{/hi}><%= await hi('x') %>").render()
    'Hi x'

Debugging:
Set ``KILN_TEMPLATE_DEBUG=1`` to print every generated render function to
stderr.

"""

from kiln._types import Node, NodeKind, Source
from kiln.compiler import Compiler, GeneratedCode
from kiln.exceptions import (
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateSyntaxError,
    build_source_snippet,
)
from kiln.parser import parse_template
from kiln.template import Template, render
from kiln.tstring import tmpl
from kiln.utils.html import Markup, xml_escape
from kiln.utils.matcher import Cursor, sticky_match

__version__ = "0.1.0"

__all__ = [
    "Compiler",
    "Cursor",
    "ErrorCode",
    "GeneratedCode",
    "Markup",
    "Node",
    "NodeKind",
    "Source",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateSyntaxError",
    "__version__",
    "build_source_snippet",
    "parse_template",
    "render",
    "sticky_match",
    "tmpl",
    "xml_escape",
]
