from types import SimpleNamespace

import pytest

from kiln import Template
from kiln.tstring import tmpl


def _tstring(strings, values):
    return SimpleNamespace(
        strings=tuple(strings),
        interpolations=tuple(SimpleNamespace(value=v) for v in values),
    )


def test_plain_string_source() -> None:
    template = tmpl("<%= 1 + 1 %>", name="plain")
    assert isinstance(template, Template)
    assert template.name == "plain"
    assert template.source == "<%= 1 + 1 %>"


def test_interpolations_become_source() -> None:
    template = tmpl(_tstring(["<%= ", " %>!"], ["1 + 1"]))
    assert template.source == "<%= 1 + 1 %>!"


def test_interpolated_values_are_not_escaped() -> None:
    template = tmpl(_tstring(["<html>", "</html>"], ["<%= '<html>' %>"]))
    assert template.source == "<html><%= '<html>' %></html>"


def test_non_string_values_are_stringified() -> None:
    template = tmpl(_tstring(["<%= ", " * 2 %>"], [21]))
    assert template.source == "<%= 21 * 2 %>"


@pytest.mark.asyncio
async def test_render_tagged_template() -> None:
    template = tmpl(_tstring(['<html><%= "<html>" %></html>'], []))
    assert await template.render() == "<html>&lt;html&gt;</html>"
    assert await Template(template).render() == "<html>&lt;html&gt;</html>"


@pytest.mark.asyncio
async def test_compiled_template_renders_many_times() -> None:
    fn = tmpl(_tstring(["<html><%= test %></html>"], [])).compile()
    assert await fn({"test": "this"}) == "<html>this</html>"
    assert await fn({"test": "works"}) == "<html>works</html>"
    assert await fn(test="too") == "<html>too</html>"


def test_rejects_other_objects() -> None:
    with pytest.raises(TypeError):
        tmpl(42)  # type: ignore[arg-type]
