"""Asset collection output: build final tags and inject them into HTML.

A page render leaves its style/script/head contributions in a
`RenderCollector`, keyed by component path. This module turns those into
`AssetTags` and places them into the document:

- head tags and the ``<style>`` tag go right before the first ``</head>``
- the ``<script>`` tag goes right before the first ``</body>``

A missing insertion point is not fatal here: the tag is skipped and a
warning is logged.

"""

from __future__ import annotations

import logging

from tml._types import AssetTags, CodeTransformer, RenderCollector
from tml.minify import MinifyTransformer
from tml.utils.lru_cache import LRUCache

logger = logging.getLogger(__name__)

HEAD_CLOSE = "</head>"
BODY_CLOSE = "</body>"

DEFAULT_ASSET_CACHE_SIZE = 100


def dedupe_head_tags(collector: RenderCollector) -> str:
    """Join head contributions, dropping repeats (compared after trimming).

    First-seen order is preserved.
    """
    seen: dict[str, None] = {}
    for content in collector.head_tags.values():
        seen.setdefault(content.strip(), None)
    return "\n".join(tag for tag in seen if tag)


def collected_css(collector: RenderCollector) -> str:
    return "\n\n".join(collector.styles.values())


def collected_js(collector: RenderCollector) -> str:
    return "\n\n".join(collector.scripts.values())


def build_assets(
    collector: RenderCollector,
    transformer: CodeTransformer | None = None,
) -> AssetTags:
    """Build final tags, passing CSS and JS through *transformer*.

    Args:
        collector: Contributions from one page render
        transformer: CSS/JS post-processor; defaults to `MinifyTransformer`
    """
    transformer = transformer or MinifyTransformer()

    css_tag = ""
    if collector.styles:
        css = transformer.css(collected_css(collector))
        if css:
            css_tag = f"<style>{css}</style>"

    js_tag = ""
    if collector.scripts:
        js = transformer.js(collected_js(collector))
        if js:
            js_tag = f"<script>{js}</script>"

    return AssetTags(head_tag=dedupe_head_tags(collector), css_tag=css_tag, js_tag=js_tag)


def build_inline_assets(collector: RenderCollector) -> AssetTags:
    """Build tags that embed collected CSS and JS as written."""
    css_tag = f"<style>\n{collected_css(collector)}\n</style>" if collector.styles else ""
    js_tag = f"<script>\n{collected_js(collector)}\n</script>" if collector.scripts else ""
    return AssetTags(head_tag=dedupe_head_tags(collector), css_tag=css_tag, js_tag=js_tag)


def _insert_before(html: str, marker: str, content: str) -> str | None:
    index = html.find(marker)
    if index == -1:
        return None
    return f"{html[:index]}{content}{html[index:]}"


def inject_assets(html: str, tags: AssetTags) -> str:
    """Insert *tags* at their insertion points; the rest of *html* is untouched."""
    result = html

    head_insert = "".join(f"{tag}\n" for tag in (tags.head_tag, tags.css_tag) if tag)
    if head_insert:
        injected = _insert_before(result, HEAD_CLOSE, head_insert)
        if injected is None:
            logger.warning("No %s in document; head and style tags were not injected", HEAD_CLOSE)
        else:
            result = injected

    if tags.js_tag:
        injected = _insert_before(result, BODY_CLOSE, f"{tags.js_tag}\n")
        if injected is None:
            logger.warning("No %s in document; script tag was not injected", BODY_CLOSE)
        else:
            result = injected

    return result


class AssetBuilder:
    """Memoizing front for `build_assets`.

    Pages that render the same set of contributions share one build. The
    cache is bounded; the least recently used entry is evicted first.

    Example:
            >>> builder = AssetBuilder()
            >>> tags = builder.build(engine.render_page("pages/home").collector)
            >>> html = inject_assets(result.html, tags)

    """

    __slots__ = ("_cache", "transformer")

    def __init__(
        self,
        transformer: CodeTransformer | None = None,
        maxsize: int = DEFAULT_ASSET_CACHE_SIZE,
    ):
        self.transformer = transformer or MinifyTransformer()
        self._cache: LRUCache[tuple[tuple[tuple[str, str], ...], ...], AssetTags] = LRUCache(maxsize)

    @staticmethod
    def _key(collector: RenderCollector) -> tuple[tuple[tuple[str, str], ...], ...]:
        return (
            tuple(collector.styles.items()),
            tuple(collector.scripts.items()),
            tuple(collector.head_tags.items()),
        )

    def build(self, collector: RenderCollector) -> AssetTags:
        return self._cache.get_or_set(
            self._key(collector),
            lambda: build_assets(collector, self.transformer),
        )

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
