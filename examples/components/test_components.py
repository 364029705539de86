"""Tests for the components example."""


class TestComponentsApp:
    """Verify layout/children/include composition works end-to-end."""

    def test_card_components_rendered(self, example_app) -> None:
        assert example_app.output.count("card-header") == 3
        assert "1. AST-native" in example_app.output
        assert "2. Scoped assets" in example_app.output
        assert "3. Zero deps" in example_app.output

    def test_card_body_has_children(self, example_app) -> None:
        assert "<p>Compiles to Python AST directly</p>" in example_app.output
        assert "<p>Pure Python, no dependencies</p>" in example_app.output

    def test_alert_component_rendered(self, example_app) -> None:
        assert "alert-warning" in example_app.output
        assert "alpha release" in example_app.output

    def test_page_title(self, example_app) -> None:
        assert "<h1>Component Demo</h1>" in example_app.output
        assert "<title>Component Demo</title>" in example_app.output

    def test_provided_theme(self, example_app) -> None:
        assert 'class="theme-dark"' in example_app.output
        assert "card-dark" in example_app.output

    def test_head_tag_injected(self, example_app) -> None:
        head = example_app.output.split("</head>")[0]
        assert '<meta name="description" content="Component Demo">' in head

    def test_assets_collected_once(self, example_app) -> None:
        assert example_app.result.css.count(".card{") == 1
        assert ".alert-warning{background:#fff3cd}" in example_app.result.css
        assert example_app.result.js.startswith("(function(){")
