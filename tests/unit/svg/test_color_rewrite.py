from __future__ import annotations

from iconoma.svg.colors import replace_in_css_text, rewrite_colors, rewrite_inline_style
from iconoma.svg.document import SVG_NAMESPACE, parse_svg

PATH = f"{{{SVG_NAMESPACE}}}path"
RECT = f"{{{SVG_NAMESPACE}}}rect"
STYLE = f"{{{SVG_NAMESPACE}}}style"


def test_rewrite_covers_attributes_inline_style_and_style_text() -> None:
    root = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<path fill="#F00" stroke="none" style="fill: #ff0000; opacity: 0.5"/>'
        '<rect fill="url(#grad)"/>'
        "<style>.a{fill:#FF0000}.b{fill:#ff000080}.c{fill:#f00}</style>"
        "</svg>"
    )

    count = rewrite_colors(
        root,
        {"#ff0000": "var(--primary)", "none": "red"},
        replace_style_element_text=True,
    )

    path = root.find(PATH)
    rect = root.find(RECT)
    style = root.find(STYLE)
    assert path is not None and rect is not None and style is not None
    assert count == 3
    assert path.get("fill") == "var(--primary)"
    assert path.get("stroke") == "none"
    assert path.get("style") == "fill: var(--primary); opacity: 0.5"
    assert rect.get("fill") == "url(#grad)"
    assert style.text == ".a{fill:var(--primary)}.b{fill:#ff000080}.c{fill:var(--primary)}"


def test_style_element_text_is_untouched_unless_enabled() -> None:
    root = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg"><style>.a{fill:#ff0000}</style></svg>'
    )

    count = rewrite_colors(root, {"#ff0000": "currentColor"})

    style = root.find(STYLE)
    assert style is not None
    assert count == 0
    assert style.text == ".a{fill:#ff0000}"


def test_unmapped_colors_and_sentinels_are_left_alone() -> None:
    root = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<path fill="currentColor" stroke="#00ff00"/>'
        "</svg>"
    )

    count = rewrite_colors(root, {"currentColor": "#000", "#ff0000": "blue"})

    path = root.find(PATH)
    assert path is not None
    assert count == 0
    assert path.get("fill") == "currentColor"
    assert path.get("stroke") == "#00ff00"


def test_inline_style_is_only_reserialized_on_substitution() -> None:
    assert rewrite_inline_style("fill:#00f;opacity:1", {"#ff0000": "red"}) is None
    assert (
        rewrite_inline_style("opacity:1;fill:RGB(255,0,0)", {"#ff0000": "var(--x)"})
        == "opacity: 1; fill: var(--x)"
    )


def test_css_text_substitution_does_not_match_longer_literals() -> None:
    css = ".a{fill:#aabbcc}.b{fill:#aabbccdd}.c{stroke:#ABC}.d{fill:#abcd}"

    rewritten = replace_in_css_text(css, {"#aabbcc": "currentColor"})

    assert rewritten == ".a{fill:currentColor}.b{fill:#aabbccdd}.c{stroke:currentColor}.d{fill:#abcd}"


def test_css_text_substitution_handles_alpha_hex_keys() -> None:
    css = ".a{fill:#AABBCCDD}.b{fill:#abcd}.c{fill:#aabbcc}"

    rewritten = replace_in_css_text(css, {"#aabbccdd": "var(--glass)"})

    assert rewritten == ".a{fill:var(--glass)}.b{fill:var(--glass)}.c{fill:#aabbcc}"
