"""Pytest configuration and fixtures for tml tests."""

import pytest

from tml import DictLoader, Engine


def component(template: str, style: str = "", script: str = "") -> str:
    """Build single-file component source from its three blocks."""
    source = f"<template>\n{template}\n</template>"
    if style:
        source += f"\n<style>\n{style}\n</style>"
    if script:
        source += f"\n<script>\n{script}\n</script>"
    return source


@pytest.fixture
def make_engine():
    """Factory for an Engine backed by a DictLoader of path → template text."""

    def _make(templates: dict[str, str], **kwargs) -> Engine:
        loader = DictLoader({path: component(text) for path, text in templates.items()})
        return Engine(loader=loader, **kwargs)

    return _make


@pytest.fixture
def views_dir(tmp_path):
    """Views directory with a layout, a page and two components."""
    files = {
        "layouts/main.tml": component(
            "<html>\n<head>\n<title>{{ title }}</title>\n</head>\n<body>\n@children\n</body>\n</html>"
        ),
        "pages/home.tml": component(
            "@component(layouts/main)\n"
            "@head\n"
            '<meta name="description" content="home">\n'
            "@end\n"
            "<h1>{{ title }}</h1>\n"
            '@include(components/card, {"heading": "First"})\n'
            '@include(components/card, {"heading": "Second"})\n'
            "@end",
            style="h1 {\n  color: navy;\n}",
        ),
        "components/card.tml": component(
            '<div class="card">{{ heading }}</div>',
            style="/* card */\n.card {\n  padding: 1rem;\n}",
            script="console.log('card');",
        ),
        "components/plain.tml": component("<p>plain</p>"),
    }
    for name, source in files.items():
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
    return tmp_path


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )


def assert_in_order(template_result: str, *expected_parts: str) -> None:
    """Assert the parts appear in the result in the given order."""
    position = -1
    for part in expected_parts:
        index = template_result.find(part, position + 1)
        assert index > position, f"{part!r} not found after position {position} in {template_result!r}"
        position = index
