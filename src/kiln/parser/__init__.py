"""Template parser: source lines to a flat node stream."""

from kiln.parser.blocks import extract_blocks
from kiln.parser.core import parse_template
from kiln.parser.lines import Directive, classify_line
from kiln.parser.tags import append_nodes, parse_line

__all__ = [
    "Directive",
    "append_nodes",
    "classify_line",
    "extract_blocks",
    "parse_line",
    "parse_template",
]
