"""Kiln compiler: node stream to the source of a render coroutine."""

from kiln.compiler.core import Compiler, GeneratedCode
from kiln.compiler.statements import Statement, split_statements

__all__ = [
    "Compiler",
    "GeneratedCode",
    "Statement",
    "split_statements",
]
