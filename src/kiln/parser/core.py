"""Template parser driver.

Feeds source lines through the line classifier and the tag parser and
concatenates the results into one flat node stream.

Whitespace Rules:
- ``%`` directive lines never produce a newline of their own; ``%=`` and
  ``%==`` lines output one newline after the value unless they are the last
  line of the template.
- A tag closed with ``=%>`` at the end of a line removes that line's newline
  and the blanks in front of the tag.
- A block marker at the end of a line removes that line's newline.

The only state carried from one line to the next is the current mode: TEXT,
or the kind of a tag that is still open.
"""

from __future__ import annotations

from collections.abc import Sequence

from kiln._types import Node, NodeKind
from kiln.parser.lines import classify_line
from kiln.parser.tags import append_nodes, parse_line


def parse_template(lines: Sequence[str]) -> list[Node]:
    """Parse template source lines into a node stream.

    Args:
        lines: Physical source lines without line endings.

    Returns:
        Nodes in document order, with exactly one LINE_BREAK per line.
    """
    nodes: list[Node] = []
    last = len(lines) - 1
    kind = NodeKind.TEXT

    for i, line in enumerate(lines):
        is_last = i == last

        if kind is NodeKind.TEXT:
            directive = classify_line(line)
            if directive is not None:
                if directive.is_literal:
                    line_nodes, _ = parse_line(
                        directive.indent + "%" + directive.value, kind, is_last
                    )
                    append_nodes(nodes, *line_nodes)
                else:
                    append_nodes(nodes, Node(directive.kind, directive.value))
                    if directive.kind.is_expression and not is_last:
                        append_nodes(nodes, Node(NodeKind.TEXT, "\n"))
                append_nodes(nodes, Node(NodeKind.TAG_END), Node(NodeKind.LINE_BREAK))
                continue

        # Blank line inside a multi-line tag
        elif line == "":
            append_nodes(nodes, Node(kind), Node(NodeKind.LINE_BREAK))
            continue

        line_nodes, kind = parse_line(line, kind, is_last)
        append_nodes(nodes, *line_nodes, Node(NodeKind.LINE_BREAK))

    return nodes
