"""Small helpers shared by the parser and the template runtime."""

from kiln.utils.html import Markup, xml_escape
from kiln.utils.matcher import Cursor, sticky_match

__all__ = ["Cursor", "Markup", "sticky_match", "xml_escape"]
