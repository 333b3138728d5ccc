"""Reusable block markers inside plain text.

``<{name}>``, ``<{name(params)}>`` and ``<{/name}>`` become
``BLOCK_START``/``BLOCK_END`` nodes. The double-brace forms ``<{{name}}>`` and
``<{{/name}}>`` are an escape: they are replaced in place with the
single-brace text and never define a block.

Whitespace-only text directly in front of a block marker is dropped so
block tags can be indented freely.
"""

from __future__ import annotations

import re

from kiln._types import Node, NodeKind

BLOCK_NAME = r"(/?)(\w+)(?:\s*\(([^}]*)\))?"
BLOCK_RE = re.compile(rf"(.*?)<\{{{BLOCK_NAME}\}}>(.*)", re.DOTALL)
BLOCK_REPLACE_RE = re.compile(rf"<\{{\{{{BLOCK_NAME}\}}\}}>")


def _block_replace(match: re.Match[str]) -> str:
    slash, name, parameters = match.groups()
    if parameters is not None:
        name = f"{name}({parameters})"
    return f"<{{{slash}{name}}}>"


def extract_blocks(text: str) -> list[Node]:
    """Split a plain-text fragment into text and block marker nodes.

    Args:
        text: Text that is not inside any tag.

    Returns:
        Nodes in document order. Empty for empty input.
    """
    if not text:
        return []

    match = BLOCK_RE.fullmatch(text)
    if match is None:
        return [Node(NodeKind.TEXT, BLOCK_REPLACE_RE.sub(_block_replace, text))]

    prefix, slash, name, parameters, suffix = match.groups()
    if slash:
        node = Node(NodeKind.BLOCK_END, name)
    else:
        node = Node(NodeKind.BLOCK_START, name, parameters=parameters or "")

    prefix_nodes = extract_blocks(prefix) if prefix.strip() else []
    return [*prefix_nodes, node, *extract_blocks(suffix)]
