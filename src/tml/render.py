"""One-shot rendering: views directory + entry component → HTML, CSS, JS.

`render` builds a throwaway `Engine`, renders the entry page, injects its
head contributions and hands the collected CSS/JS to a code transformer.
Unlike `inject_assets`, a page that used ``@head`` but has no ``</head>``
fails here: the content asked for a place that does not exist.

"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from tml._types import CodeTransformer, RenderOutput
from tml.assets import HEAD_CLOSE, collected_css, collected_js, dedupe_head_tags
from tml.engine import Engine
from tml.environment.config import EngineConfig
from tml.environment.exceptions import ErrorCode, RenderError
from tml.minify import MinifyTransformer


def render(
    views_dir: str | Path,
    entry: str,
    data: Mapping[str, Any] | None = None,
    *,
    context: Mapping[str, Any] | None = None,
    transformer: CodeTransformer | None = None,
) -> RenderOutput:
    """Render *entry* from *views_dir*.

    Returns:
        `RenderOutput` with the page HTML (head tags injected) and the
        transformed CSS and JS text ("" when nothing was collected)

    Raises:
        FileNotFoundError: If *views_dir* does not exist
        RenderError: If ``@head`` content has no ``</head>`` to go before

    Example:
        >>> out = render("views/", "pages/home", {"title": "TML Engine"})
        >>> out.css
        '.card{padding:1rem}'
    """
    engine = Engine(EngineConfig(views_dir=views_dir))
    result = engine.render_page(entry, data, context)
    transformer = transformer or MinifyTransformer()

    html = result.html
    head = dedupe_head_tags(result.collector)
    if head:
        index = html.find(HEAD_CLOSE)
        if index == -1:
            raise RenderError(
                "@head directive requires a </head> tag in the document",
                entry,
                0,
                code=ErrorCode.MISSING_HEAD,
            )
        html = f"{html[:index]}{head}\n{html[index:]}"

    css = transformer.css(collected_css(result.collector)) if result.collector.styles else ""
    js = transformer.js(collected_js(result.collector)) if result.collector.scripts else ""
    return RenderOutput(html=html, css=css, js=js)
