"""Pytest configuration and fixtures for kiln tests."""

import pytest

import kiln.config
from kiln import Template


@pytest.fixture
def no_debug_env(monkeypatch):
    """Render with the environment debug toggle switched off."""
    monkeypatch.setattr(kiln.config, "DEBUG", False)


@pytest.fixture
def debug_env(monkeypatch):
    """Render as if KILN_TEMPLATE_DEBUG=1 had been set at startup."""
    monkeypatch.setattr(kiln.config, "DEBUG", True)


async def render_error(source: str, data: dict | None = None, **options) -> BaseException:
    """Render a template that is expected to fail and return the exception."""
    with pytest.raises(Exception) as exc_info:
        await Template(source, **options).render(data)
    return exc_info.value


def assert_contains(text: str, *expected_parts: str) -> None:
    """Assert text contains all expected parts.

    Args:
        text: The actual error message or rendering result.
        expected_parts: Strings that should all be present in the text.
    """
    for part in expected_parts:
        assert part in text, (
            f"Output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {text!r}"
        )
