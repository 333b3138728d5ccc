"""Kiln Template package — compiled templates and their error mapping."""

from kiln.template.core import Template, render
from kiln.template.errors import locate, raise_with_context

__all__ = [
    "Template",
    "locate",
    "raise_with_context",
    "render",
]
