"""Tag parser for one physical line of mixed content.

Scans for ``<%`` openers while in text mode and for ``%>``/``=%>`` closers
while inside a tag. A tag that is not closed on its line keeps the parser in
the tag's mode, and the next line continues the same node kind.

Openers:
    ```
    <%      CODE
    <%=     ESCAPED_EXPRESSION
    <%==    RAW_EXPRESSION
    <%#     COMMENT
    <%%     literal "<%" text
    ```
"""

from __future__ import annotations

import re
from dataclasses import replace

from kiln._types import Node, NodeKind
from kiln.parser.blocks import extract_blocks
from kiln.utils.matcher import Cursor, sticky_match

START_RE = re.compile(r"(.*?)<%(%|#|={1,2})?", re.DOTALL)
END_RE = re.compile(r"(.*?)(=)?%>", re.DOTALL)

TAG_KINDS: dict[str | None, NodeKind] = {
    None: NodeKind.CODE,
    "#": NodeKind.COMMENT,
    "=": NodeKind.ESCAPED_EXPRESSION,
    "==": NodeKind.RAW_EXPRESSION,
}

_TRIM_CHARS = " \t"


def append_nodes(nodes: list[Node], *new_nodes: Node) -> None:
    """Append nodes, merging a content node into an equal-kind predecessor."""
    for node in new_nodes:
        if nodes and node.kind.is_content and nodes[-1].kind is node.kind:
            nodes[-1] = replace(nodes[-1], value=nodes[-1].value + node.value)
        else:
            nodes.append(node)


def _trim_leading_text(nodes: list[Node], index: int | None) -> None:
    """Strip trailing blanks from the text node in front of a trimming tag."""
    if index is None:
        return
    node = nodes[index]
    value = node.value.rstrip(_TRIM_CHARS)
    if value:
        nodes[index] = replace(node, value=value)
    else:
        del nodes[index]


def parse_line(line: str, kind: NodeKind, is_last: bool) -> tuple[list[Node], NodeKind]:
    """Parse one physical line.

    Args:
        line: The line without its line ending.
        kind: Mode carried over from the previous line (TEXT outside tags).
        is_last: True for the final line of the template, which never gets
            a trailing newline.

    Returns:
        Tuple of (nodes, mode for the next line).
    """
    nodes: list[Node] = []
    trim = False
    # Index of the same-line text node in front of the currently open tag
    leading_text: int | None = None
    cursor = Cursor(line)

    while not cursor.exhausted:
        # Tag end
        if kind is not NodeKind.TEXT:
            end = sticky_match(cursor, END_RE)
            if end is not None:
                append_nodes(nodes, Node(kind, end[1]), Node(NodeKind.TAG_END))
                if end[2] == "=" and cursor.exhausted:
                    trim = True
                    _trim_leading_text(nodes, leading_text)
                kind = NodeKind.TEXT
                leading_text = None
            else:
                append_nodes(nodes, Node(kind, cursor.rest()))
            continue

        # Tag start
        start = sticky_match(cursor, START_RE)
        if start is None:
            append_nodes(nodes, *extract_blocks(cursor.rest()))
            continue

        leftovers, marker = start.groups()
        if leftovers:
            append_nodes(nodes, *extract_blocks(leftovers))

        if marker == "%":
            append_nodes(nodes, Node(NodeKind.TEXT, "<%"))
        else:
            leading_text = len(nodes) - 1 if nodes and nodes[-1].kind is NodeKind.TEXT else None
            kind = TAG_KINDS[marker]
            append_nodes(nodes, Node(kind))

    # A block marker at the end of a line swallows the line break
    if nodes and nodes[-1].kind in (NodeKind.BLOCK_START, NodeKind.BLOCK_END):
        trim = True

    if kind is NodeKind.TEXT and not trim and not is_last:
        append_nodes(nodes, Node(NodeKind.TEXT, "\n"))

    return nodes, kind
