from kiln.utils.html import Markup, xml_escape


def test_plain_text_is_unchanged() -> None:
    assert xml_escape("Hello World!") == "Hello World!"


def test_escapes_markup_characters() -> None:
    assert xml_escape("привет<foo>") == "привет&lt;foo&gt;"
    assert xml_escape("<p>") == "&lt;p&gt;"
    assert (
        xml_escape("la<f>\nbar\"baz\"'yada\n'&lt;la")
        == "la&lt;f&gt;\nbar&quot;baz&quot;&#39;yada\n&#39;&amp;lt;la"
    )


def test_markup_passes_through() -> None:
    assert xml_escape(Markup("<p>")) == "<p>"


def test_html_interface_is_respected() -> None:
    class HtmlLike:
        def __html__(self) -> str:
            return "<b>safe</b>"

    assert xml_escape(HtmlLike()) == "<b>safe</b>"


def test_non_strings_are_stringified() -> None:
    assert xml_escape(None) == "None"
    assert xml_escape(42) == "42"
    assert xml_escape(["<a>"]) == "[&#39;&lt;a&gt;&#39;]"


def test_markup_is_a_str() -> None:
    value = Markup("<i>x</i>")
    assert isinstance(value, str)
    assert value == "<i>x</i>"
    assert value.__html__() == "<i>x</i>"
    assert repr(value) == "Markup('<i>x</i>')"
