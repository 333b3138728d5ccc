"""Tests for the compiler: statement splitting, suites, line table."""

from __future__ import annotations

import pytest

from kiln import Compiler, ErrorCode, GeneratedCode, Source, TemplateSyntaxError, parse_template
from kiln.compiler import split_statements


def generate(text: str, name: str = "template") -> GeneratedCode:
    lines = Source.from_text(text, name).lines
    return Compiler(name, "<test>").compile(parse_template(lines))


def body(code: GeneratedCode) -> list[str]:
    """Generated lines between the prologue and the final return."""
    return code.source.splitlines()[3:-1]


class TestSplitStatements:
    def test_one_statement_per_line(self) -> None:
        statements = split_statements("a = 1\nb = 2")
        assert [s.offset for s in statements] == [0, 1]
        assert [s.lines for s in statements] == [("a = 1",), ("b = 2",)]

    def test_bracketed_statement_spans_lines(self) -> None:
        (statement,) = split_statements("x = [\n  1,\n  2]")
        assert statement.lines == ("x = [", "1,", "2]")
        assert statement.offset == 0

    def test_blank_and_comment_lines_are_dropped(self) -> None:
        statements = split_statements("\n# note\n\nfoo = 'bar'\n")
        assert len(statements) == 1
        assert statements[0].offset == 3

    def test_suite_opener(self) -> None:
        (statement,) = split_statements("for i in range(3):  # loop")
        assert statement.keyword == "for"
        assert statement.opens_suite

    def test_lambda_does_not_open_suite(self) -> None:
        (statement,) = split_statements("f = lambda: 1")
        assert not statement.opens_suite

    def test_end(self) -> None:
        (statement,) = split_statements("  end   # done")
        assert statement.is_end

    def test_end_as_name_is_not_end(self) -> None:
        (statement,) = split_statements("end = 5")
        assert not statement.is_end

    def test_incomplete_code_is_kept(self) -> None:
        (statement,) = split_statements("x = (")
        assert not statement.complete
        assert statement.lines == ("x = (",)

    def test_empty(self) -> None:
        assert split_statements(" ") == []


class TestCodeGeneration:
    def test_prologue_and_epilogue(self) -> None:
        code = generate("")
        assert code.source == (
            "async def render():\n"
            "    _kiln_buf = []\n"
            "    _kiln_append = _kiln_buf.append\n"
            "    return ''.join(_kiln_buf)\n"
        )

    def test_text_and_expressions(self) -> None:
        code = generate("Hi <%= name %> <%== raw %>")
        assert body(code) == [
            "    _kiln_append('Hi ')",
            "    _kiln_append(_kiln_escape(name))",
            "    _kiln_append(' ')",
            "    _kiln_append(_kiln_str(raw))",
        ]

    def test_trailing_semicolon_is_removed(self) -> None:
        assert body(generate("<%= 2 + 2; %>")) == ["    _kiln_append(_kiln_escape(2 + 2))"]

    def test_comment_in_expression_closes_on_next_line(self) -> None:
        assert body(generate("<%= x  # why %>")) == [
            "    _kiln_append(_kiln_escape(x  # why",
            "    ))",
        ]

    def test_empty_expression_emits_nothing(self) -> None:
        assert body(generate("<%= %>")) == []

    def test_suites_are_indented(self) -> None:
        code = generate("% for i in items:\n%   if i:\n<%= i %>\n%   end\n% end")
        assert body(code) == [
            "    for i in items:",
            "        if i:",
            "            _kiln_append(_kiln_escape(i))",
            "            _kiln_append('\\n')",
        ]

    def test_else_reopens_suite(self) -> None:
        code = generate("% if a:\nA\n% elif b:\nB\n% else:\nC\n% end")
        assert body(code) == [
            "    if a:",
            "        _kiln_append('A\\n')",
            "    elif b:",
            "        _kiln_append('B\\n')",
            "    else:",
            "        _kiln_append('C\\n')",
        ]

    def test_empty_suite_gets_pass(self) -> None:
        assert body(generate("% if a:\n% end")) == ["    if a:", "        pass"]

    def test_match_case(self) -> None:
        code = generate("% match x:\n% case 1:\none\n% case _:\nother\n% end\nafter")
        assert body(code) == [
            "    match x:",
            "        case 1:",
            "            _kiln_append('one\\n')",
            "        case _:",
            "            _kiln_append('other\\n')",
            "    _kiln_append('after')",
        ]

    def test_block(self) -> None:
        code = generate("<{foo(bar)}><%= bar %><{/foo}>")
        assert body(code) == [
            "    async def foo(bar):",
            "        _kiln_buf = []",
            "        _kiln_append = _kiln_buf.append",
            "        _kiln_append(_kiln_escape(bar))",
            "        return _kiln_safe(''.join(_kiln_buf))",
        ]


class TestLineTable:
    def test_one_entry_per_generated_line(self) -> None:
        code = generate("a\n<%= b %>\nc")
        assert len(code.line_map) == len(code.source.splitlines())

    def test_prologue_maps_to_first_line(self) -> None:
        code = generate("\n\n% x = 1")
        assert code.line_map[:3] == (1, 1, 1)

    def test_statements_keep_their_line(self) -> None:
        code = generate("one\ntwo\n% x = 1\n% y = 2")
        lines = code.source.splitlines()
        assert code.template_line(lines.index("    x = 1") + 1) == 3
        assert code.template_line(lines.index("    y = 2") + 1) == 4

    def test_multi_line_expression_lines(self) -> None:
        code = generate("<%=\n 1 +\n 2\n%>\n% boom()")
        lines = code.source.splitlines()
        assert code.template_line(lines.index("     1 +") + 1) == 2
        assert code.template_line(lines.index("     2") + 1) == 3
        assert code.template_line(lines.index("    boom()") + 1) == 5

    def test_multi_line_code_lines(self) -> None:
        code = generate("<%\n\nfoo = 'bar'\n\n%>\n% boom()")
        lines = code.source.splitlines()
        assert code.template_line(lines.index("    foo = 'bar'") + 1) == 3
        assert code.template_line(lines.index("    boom()") + 1) == 6

    def test_out_of_range_lines_are_clamped(self) -> None:
        code = generate("a\nb")
        assert code.template_line(0) == 1
        assert code.template_line(10_000) == code.line_map[-1]


class TestBlockBalance:
    def test_unclosed_suite(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            generate("test\n% if True:\nx\n")
        error = exc_info.value
        assert error.code is ErrorCode.UNCLOSED_BLOCK
        assert error.lineno == 2
        assert "Unclosed 'if' suite" in error.message
        assert error.message.endswith(" in template")

    def test_unclosed_block(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            generate("\n<{foo}>abc", name="page.html")
        assert exc_info.value.code is ErrorCode.UNCLOSED_BLOCK
        assert exc_info.value.lineno == 2
        assert exc_info.value.message == "Unclosed block '<{foo}>' in page.html"

    def test_stray_end(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            generate("a\n% end")
        assert exc_info.value.code is ErrorCode.UNEXPECTED_END
        assert exc_info.value.lineno == 2

    def test_block_end_name_must_match(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="expected '<{/foo}>'") as exc_info:
            generate("<{foo}>x<{/bar}>")
        assert exc_info.value.code is ErrorCode.UNEXPECTED_END

    def test_block_cannot_close_inside_code_suite(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="expected 'end' for 'if'"):
            generate("<{foo}><% if x: %>y<{/foo}>")

    def test_end_cannot_close_block(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="Unexpected 'end'"):
            generate("<{foo}>x<% end %><{/foo}>")
