"""Tests for the single-file component parser."""

from __future__ import annotations

from hypothesis import given, settings

from tml.parser import parse

from .strategies import block_body, block_kinds


class TestParse:
    """Block splitting."""

    def test_all_blocks(self):
        parsed = parse(
            "<template>\n  <p>Hi</p>\n</template>\n"
            "<style>\n  p { margin: 0; }\n</style>\n"
            "<script>\n  console.log(1);\n</script>"
        )
        assert parsed.template == "<p>Hi</p>"
        assert parsed.style == "p { margin: 0; }"
        assert parsed.script == "console.log(1);"

    def test_missing_blocks_are_empty(self):
        parsed = parse("<template><p>only</p></template>")
        assert parsed.style == ""
        assert parsed.script == ""

    def test_empty_source(self):
        parsed = parse("")
        assert (parsed.template, parsed.style, parsed.script) == ("", "", "")

    def test_any_order(self):
        parsed = parse("<script>a()</script><style>b{}</style><template>c</template>")
        assert (parsed.template, parsed.style, parsed.script) == ("c", "b{}", "a()")

    def test_first_block_wins(self):
        parsed = parse("<style>first</style><style>second</style><template>t</template>")
        assert parsed.style == "first"

    def test_content_outside_blocks_ignored(self):
        parsed = parse("comment\n<template>body</template>\ntrailing")
        assert parsed.template == "body"

    def test_multiline_template(self):
        parsed = parse("<template>\n@if(x)\n  <p>y</p>\n@end\n</template>")
        assert parsed.template == "@if(x)\n  <p>y</p>\n@end"


class TestParseProperties:
    """Property-based parser invariants."""

    @given(
        order=block_kinds,
        template=block_body,
        style=block_body,
        script=block_body,
    )
    @settings(max_examples=200)
    def test_blocks_roundtrip_in_any_order(self, order, template, style, script) -> None:
        """Rebuilding a document from its blocks yields the trimmed contents back."""
        bodies = {"template": template, "style": style, "script": script}
        source = "\n".join(f"<{kind}>{bodies[kind]}</{kind}>" for kind in order)
        parsed = parse(source)
        assert parsed.template == template.strip()
        assert parsed.style == style.strip()
        assert parsed.script == script.strip()
