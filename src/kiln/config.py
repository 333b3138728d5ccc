"""Process-level defaults for template construction.

The debug toggle is read from the environment exactly once, when this module
is imported. Templates take an explicit ``debug=`` option; only when it is
left as None does the environment value apply.

Environment:
    KILN_TEMPLATE_DEBUG: ``1`` writes every generated render function to
        stderr at compile time. Rendering output is unaffected.

"""

from __future__ import annotations

import os
from collections.abc import Mapping

DEBUG_ENV_VAR = "KILN_TEMPLATE_DEBUG"

# Diagnostic label for templates constructed without ``name=``
DEFAULT_NAME = "template"


def debug_from_env(environ: Mapping[str, str] | None = None) -> bool:
    """Return True if the debug environment variable is set to ``1``."""
    if environ is None:
        environ = os.environ
    return environ.get(DEBUG_ENV_VAR) == "1"


DEBUG: bool = debug_from_env()


def resolve_debug(debug: bool | None) -> bool:
    """Explicit option wins; None falls back to the environment default."""
    return DEBUG if debug is None else debug
