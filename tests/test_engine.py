"""Tests for the component tree renderer."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from tml import (
    DictLoader,
    Engine,
    EngineConfig,
    ErrorCode,
    PathTraversalError,
    RenderCollector,
    RenderError,
    TemplateNotFoundError,
)

from .conftest import assert_contains, assert_in_order, component


class TestInclude:
    """@include resolves another component with the current data."""

    def test_basic_include(self, make_engine):
        engine = make_engine(
            {
                "page": "<h1>Hi</h1>\n@include(partials/footer)",
                "partials/footer": "<footer>{{ year }}</footer>",
            }
        )
        assert engine.render_page("page", {"year": 2024}).html == "<h1>Hi</h1>\n<footer>2024</footer>\n"

    def test_props_override_data(self, make_engine):
        engine = make_engine({"page": '@include(badge, {"text": "A"})', "badge": "{{ text }}"})
        assert engine.render_page("page", {"text": "B"}).html == "A\n"

    def test_inline_include(self, make_engine):
        engine = make_engine({"page": '<ul>@include(item, {"n": 1})</ul>', "item": "<li>{{ n }}</li>"})
        assert engine.render_page("page").html == "<ul><li>1</li>\n</ul>\n"

    def test_include_sees_loop_variable(self, make_engine):
        engine = make_engine({"page": "@each(item of items)\n@include(row)\n@end", "row": "<li>{{ item }}</li>"})
        assert engine.render_page("page", {"items": [1, 2]}).html == "<li>1</li>\n<li>2</li>\n"

    def test_include_does_not_pass_children(self, make_engine):
        engine = make_engine(
            {
                "page": "@component(wrapper)\nX\n@end",
                "wrapper": "<main>@include(inner)</main>",
                "inner": "[@children]",
            }
        )
        assert engine.render_page("page").html == "<main>[]\n</main>\n"

    def test_include_scope_is_isolated(self, make_engine):
        engine = make_engine({"page": "@include(child)\n{{ value }}", "child": "<% value = 'child' %>"})
        assert engine.render_page("page", {"value": "page"}).html == "page\n"


class TestComponent:
    """@component passes captured children to the resolved component."""

    def test_layout_wraps_children(self, make_engine):
        engine = make_engine(
            {
                "page": "@component(layout)\n<p>{{ msg }}</p>\n@end",
                "layout": "<main>\n@children\n</main>",
            }
        )
        assert engine.render_page("page", {"msg": "hi"}).html == "<main>\n<p>hi</p>\n</main>\n"

    def test_props(self, make_engine):
        engine = make_engine(
            {
                "page": '@component(card, {"title": "T"})\nbody\n@end',
                "card": "<h2>{{ title }}</h2>\n@children",
            }
        )
        assert engine.render_page("page").html == "<h2>T</h2>\nbody\n"

    def test_nested_components(self, make_engine):
        engine = make_engine(
            {
                "page": "@component(outer)\n@component(inner)\ncore\n@end\n@end",
                "outer": "<outer>@children</outer>",
                "inner": "<inner>@children</inner>",
            }
        )
        assert engine.render_page("page").html == "<outer><inner>core\n</inner>\n</outer>\n"

    def test_include_inside_children(self, make_engine):
        engine = make_engine(
            {
                "page": "@component(layout)\n@include(card)\n@end",
                "layout": "<main>@children</main>",
                "card": "card",
            }
        )
        assert engine.render_page("page").html == "<main>card\n</main>\n"


class TestDepthGuard:
    """Self-referencing components stop at the depth ceiling."""

    def test_direct_recursion(self, make_engine):
        engine = make_engine({"loop": "@include(loop)"})
        with pytest.raises(RenderError) as exc_info:
            engine.render_page("loop")
        err = exc_info.value
        assert err.message == "Maximum render depth exceeded - possible circular component reference (loop -> loop)"
        assert err.code == ErrorCode.RENDER_DEPTH
        assert err.line == 0

    def test_indirect_recursion(self, make_engine):
        engine = make_engine({"a": "@component(b)\nx\n@end", "b": "@include(a)"})
        with pytest.raises(RenderError, match="Maximum render depth exceeded") as exc_info:
            engine.render_page("a")
        assert exc_info.value.message.endswith("(a -> b -> a)")

    def test_custom_ceiling(self, make_engine):
        templates = {"c1": "@include(c2)", "c2": "@include(c3)", "c3": "@include(c4)", "c4": "leaf"}
        with pytest.raises(RenderError, match="Maximum render depth"):
            make_engine(templates, max_depth=3).render_page("c1")
        assert make_engine(templates, max_depth=4).render_page("c1").html == "leaf\n"

    def test_depth_restored_after_failure(self, make_engine):
        engine = make_engine({"loop": "@include(loop)", "ok": "@include(leaf)", "leaf": "fine"})
        with pytest.raises(RenderError):
            engine.render_page("loop")
        assert engine.render_page("ok").html == "fine\n"

    def test_deep_but_finite_tree(self, make_engine):
        templates = {f"n{i}": f"@include(n{i + 1})" for i in range(99)}
        templates["n99"] = "bottom"
        assert make_engine(templates).render_page("n0").html == "bottom\n"


class TestCollector:
    """Style, script and head contributions."""

    def _engine(self) -> Engine:
        return Engine(
            loader=DictLoader(
                {
                    "page": component(
                        "@include(card)\n@include(card)\n@include(card)",
                        style="main { margin: 0; }",
                    ),
                    "card": component("<div>card</div>", style=".card {}", script="init();"),
                }
            )
        )

    def test_assets_recorded_once_per_path(self):
        result = self._engine().render_page("page")
        assert result.html.count("<div>card</div>") == 3
        assert result.collector.styles == {"page": "main { margin: 0; }", "card": ".card {}"}
        assert result.collector.scripts == {"card": "init();"}

    def test_fresh_collector_per_page(self):
        engine = self._engine()
        first = engine.render_page("page")
        second = engine.render_page("card")
        assert first.collector is not second.collector
        assert list(second.collector.styles) == ["card"]

    def test_head_tags_keyed_by_component(self, make_engine):
        engine = make_engine(
            {
                "page": "@head\n<title>{{ title }}</title>\n@end\n@include(widget)",
                "widget": "@head\n<link rel=\"stylesheet\" href=\"w.css\">\n@end\nw",
            }
        )
        result = engine.render_page("page", {"title": "T"})
        assert result.html == "w\n"
        assert result.collector.head_tags == {
            "page": "<title>T</title>\n",
            "widget": '<link rel="stylesheet" href="w.css">\n',
        }

    def test_empty_head_not_recorded(self, make_engine):
        engine = make_engine({"page": "@head\n@end\nbody"})
        assert engine.render_page("page").collector.head_tags == {}

    def test_render_component_with_explicit_collector(self, make_engine):
        engine = make_engine({"card": "{{ title }}"})
        collector = RenderCollector()
        html = engine.render_component("card", {"title": "T"}, {}, collector, children="ignored")
        assert html == "T\n"

    def test_render_document_injects_inline_assets(self):
        engine = Engine(
            loader=DictLoader(
                {
                    "page": component(
                        "<html><head></head><body>\n@include(card)\n</body></html>",
                    ),
                    "card": component("<div>card</div>", style=".card {}", script="init();"),
                }
            )
        )
        html = engine.render_document("page")
        assert_in_order(html, "<style>\n.card {}\n</style>", "</head>", "<div>card</div>", "<script>\ninit();\n</script>", "</body>")


class TestProvide:
    """@provide extends the context for descendants only."""

    def test_visible_after_not_before(self, make_engine):
        engine = make_engine(
            {
                "page": "@include(child)\n@provide(theme, 'dark')\n@include(child)",
                "child": "[{{ $context.get('theme') }}]",
            }
        )
        assert engine.render_page("page").html == "[]\n[dark]\n"

    def test_not_visible_to_siblings(self, make_engine):
        engine = make_engine(
            {
                "page": "@component(box)\n@provide(theme, 'dark')\n@include(child)\n@end\n@include(child)",
                "box": "@children",
                "child": "[{{ $context.get('theme') }}]",
            }
        )
        assert engine.render_page("page").html == "[dark]\n[]\n"

    def test_reaches_grandchildren(self, make_engine):
        engine = make_engine(
            {
                "page": "@provide(user, name)\n@include(middle)",
                "middle": "@include(leaf)",
                "leaf": "{{ $context['user'] }}",
            }
        )
        assert engine.render_page("page", {"name": "Ann"}).html == "Ann\n"

    def test_child_provide_invisible_to_parent(self, make_engine):
        engine = make_engine(
            {
                "page": "@include(child)\n[{{ $context.get('k') }}]",
                "child": "@provide(k, 1)",
            }
        )
        assert engine.render_page("page").html == "[]\n"

    def test_initial_context(self, make_engine):
        engine = make_engine({"page": "{{ $context['locale'] }}"})
        assert engine.render_page("page", {}, {"locale": "fr"}).html == "fr\n"


class TestResolution:
    """Loading, caching and path safety."""

    def test_missing_component(self, make_engine):
        engine = make_engine({"page": "@include(nowhere)"})
        with pytest.raises(TemplateNotFoundError) as exc_info:
            engine.render_page("page")
        assert "nowhere" in str(exc_info.value)
        assert "<memory:nowhere>" in str(exc_info.value)

    def test_missing_component_is_render_error(self, make_engine):
        engine = make_engine({"page": "@include(nowhere)"})
        with pytest.raises(RenderError) as exc_info:
            engine.render_page("page")
        err = exc_info.value
        assert isinstance(err, TemplateNotFoundError)
        assert err.path == "nowhere"
        assert err.line == 0
        assert err.code == ErrorCode.TEMPLATE_NOT_FOUND

    def test_missing_file_names_resolved_location(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir))
        with pytest.raises(TemplateNotFoundError) as exc_info:
            engine.render_page("pages/missing")
        assert str(views_dir / "pages" / "missing.tml") in str(exc_info.value)

    def test_traversal_in_entry(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir))
        with pytest.raises(PathTraversalError, match="Path traversal detected"):
            engine.render_page("../outside")

    def test_traversal_in_include(self, tmp_path):
        views = tmp_path / "views"
        views.mkdir()
        (tmp_path / "secret.tml").write_text(component("secret"))
        (views / "page.tml").write_text(component("@include(../secret)"))
        engine = Engine(EngineConfig(views_dir=views))
        with pytest.raises(PathTraversalError) as exc_info:
            engine.render_page("page")
        assert exc_info.value.name == "../secret"

    def test_normalized_paths_share_cache_entry(self, make_engine):
        engine = make_engine({"a/card": "card"}, cache=True)
        assert engine.get_template("a/./card") is engine.get_template("a/card")

    def test_compiled_cache_enabled(self, make_engine):
        engine = make_engine({"page": "x"}, cache=True)
        assert engine.get_template("page") is engine.get_template("page")

    def test_compiled_cache_disabled(self, make_engine):
        engine = make_engine({"page": "x"})
        assert engine.get_template("page") is not engine.get_template("page")

    def test_clear_cache_rereads_source(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir, cache=True))
        assert engine.render_page("components/plain").html == "<p>plain</p>\n"
        (views_dir / "components" / "plain.tml").write_text(component("<p>edited</p>"))
        assert engine.render_page("components/plain").html == "<p>plain</p>\n"
        engine.clear_cache()
        assert engine.render_page("components/plain").html == "<p>edited</p>\n"

    def test_missing_views_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Views directory does not exist"):
            Engine(EngineConfig(views_dir=tmp_path / "nope"))

    def test_engine_requires_source(self):
        with pytest.raises(ValueError):
            Engine()


class TestRegistries:
    """preload() and the CSS/JS registries."""

    def test_preload(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir, cache=True))
        assert engine.preload() == 4
        assert engine.get_css("components/card") == "/* card */\n.card {\n  padding: 1rem;\n}"
        assert engine.get_js("components/card") == "console.log('card');"
        assert engine.get_css("components/plain") is None
        assert set(engine.get_all_css()) == {"components/card", "pages/home"}
        assert set(engine.get_all_js()) == {"components/card"}

    def test_registry_copies(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir))
        engine.preload()
        engine.get_all_css().clear()
        assert engine.get_all_css()

    def test_registries_fill_on_render(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir))
        engine.render_page("pages/home", {"title": "Home"})
        assert set(engine.get_all_css()) == {"components/card", "pages/home"}


class TestFullPage:
    """A realistic page built from the shared views directory."""

    def test_home_page(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir))
        result = engine.render_page("pages/home", {"title": "Home"})
        assert_contains(result.html, "<title>Home</title>", "<h1>Home</h1>")
        assert_in_order(result.html, "<body>", '<div class="card">First</div>', '<div class="card">Second</div>', "</body>")
        assert list(result.collector.head_tags) == ["pages/home"]

    def test_concurrent_renders(self, views_dir):
        engine = Engine(EngineConfig(views_dir=views_dir, cache=True))
        engine.preload()

        def render(i: int) -> str:
            return engine.render_page("pages/home", {"title": f"T{i}"}).html

        with ThreadPoolExecutor(max_workers=8) as pool:
            pages = list(pool.map(render, range(32)))
        for i, html in enumerate(pages):
            assert f"<h1>T{i}</h1>" in html
