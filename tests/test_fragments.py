"""Tests for splitting rendered HTML into layout fragments."""

from tessera.views.fragments import Fragments, compose_fragments

PAGE = """<meta charset="utf-8">
<link rel="stylesheet" href="/app.css">
<style>
  h1 { color: red; }
</style>
<h1>Hello</h1>
<script src="/app.js"></script>
<script>
  console.log("inline");
</script>
<p>World</p>
"""


class TestComposeFragments:
    def test_round_trip_single_elements(self) -> None:
        html = '<meta charset="utf-8"><script>run()</script><style>p{}</style>Hello'
        fragments = compose_fragments(html)
        assert fragments.meta == '<meta charset="utf-8">'
        assert fragments.script == "<script>run()</script>"
        assert fragments.style == "<style>p{}</style>"
        assert fragments.body == "Hello"

    def test_multiple_scripts_joined_with_newline(self) -> None:
        fragments = compose_fragments(PAGE)
        assert fragments.script == (
            '<script src="/app.js"></script>\n<script>\n  console.log("inline");\n</script>'
        )

    def test_styles_and_links_in_document_order(self) -> None:
        fragments = compose_fragments(PAGE)
        assert fragments.style == (
            '<link rel="stylesheet" href="/app.css">\n<style>\n  h1 { color: red; }\n</style>'
        )

    def test_link_with_closing_tag(self) -> None:
        fragments = compose_fragments('<link rel="icon" href="/f.ico"></link>x')
        assert fragments.style == '<link rel="icon" href="/f.ico"></link>'
        assert fragments.body == "x"

    def test_body_has_no_extracted_tags(self) -> None:
        body = compose_fragments(PAGE).body
        assert "<script" not in body
        assert "<style" not in body
        assert "<link" not in body
        assert "<meta" not in body
        assert "<h1>Hello</h1>" in body
        assert "<p>World</p>" in body

    def test_body_is_trimmed(self) -> None:
        assert compose_fragments("\n\n  <p>x</p>  \n").body == "<p>x</p>"

    def test_plain_text_only(self) -> None:
        assert compose_fragments("Hello") == Fragments(body="Hello")

    def test_empty_input(self) -> None:
        assert compose_fragments("") == Fragments()

    def test_idempotent_on_body(self) -> None:
        body = compose_fragments(PAGE).body
        again = compose_fragments(body)
        assert again.script == ""
        assert again.style == ""
        assert again.meta == ""
        assert again.body == body

    def test_case_sensitive(self) -> None:
        fragments = compose_fragments("<SCRIPT>x()</SCRIPT>")
        assert fragments.script == ""
        assert fragments.body == "<SCRIPT>x()</SCRIPT>"

    def test_unclosed_script_left_in_body(self) -> None:
        """Malformed markup is not repaired."""
        fragments = compose_fragments("<script>never closed<p>x</p>")
        assert fragments.script == ""
        assert fragments.body == "<script>never closed<p>x</p>"

    def test_multiline_tag_attributes(self) -> None:
        fragments = compose_fragments('<meta\n  name="viewport"\n  content="width=device-width">ok')
        assert fragments.meta == '<meta\n  name="viewport"\n  content="width=device-width">'
        assert fragments.body == "ok"


class TestFragments:
    def test_as_context(self) -> None:
        fragments = Fragments(script="s", style="c", meta="m", body="b")
        assert fragments.as_context() == {"script": "s", "style": "c", "meta": "m", "body": "b"}
