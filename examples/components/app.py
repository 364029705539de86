"""Component tree -- layout, children, includes, provide and head tags.

A page wraps itself in a layout with @component, lists features through an
included card component, shares the theme with @provide and adds a meta
tag with @head. render() returns the finished HTML plus the collected,
minified CSS and JS.

Run:
    python app.py
"""

from pathlib import Path

from tml import render

views_dir = Path(__file__).parent / "views"

result = render(
    views_dir,
    "pages/home",
    {
        "title": "Component Demo",
        "features": [
            {"name": "AST-native", "desc": "Compiles to Python AST directly"},
            {"name": "Scoped assets", "desc": "Styles collected once per component"},
            {"name": "Zero deps", "desc": "Pure Python, no dependencies"},
        ],
        "warning_message": "This is an alpha release. API may change.",
    },
    context={"theme": "dark"},
)

output = result.html


def main() -> None:
    print(output)
    print("/* css */", result.css)
    print("/* js */", result.js)


if __name__ == "__main__":
    main()
