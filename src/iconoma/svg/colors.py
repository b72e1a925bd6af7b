"""Color normalization and structural color substitution inside SVG trees.

Three representations are rewritten:

- presentation attributes (``fill="#abc"``),
- inline ``style`` declarations (``style="fill: #abc; opacity: .5"``),
- ``<style>`` element text, opt-in and best-effort: only hex literals are
  substituted there because selectors are not parsed.

Keywords (``none``, ``currentColor``, ...), ``url(...)`` paint servers and
``var(...)`` custom-property references are never mapped, whatever the map says.
"""

from __future__ import annotations

import colorsys
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping

from iconoma.svg.document import is_element, local_name

DEFAULT_COLOR_ATTRIBUTES: tuple[str, ...] = (
    "fill",
    "stroke",
    "stop-color",
    "flood-color",
    "lighting-color",
    "color",
)

_KEYWORDS = frozenset({"none", "transparent", "currentcolor", "inherit", "initial", "unset"})
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_NUMBER = r"(\d*\.?\d+)"
_ALPHA = r"(\d*\.?\d+%?)"
_RGB_COMMA_RE = re.compile(
    rf"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*{_ALPHA}\s*)?\)$"
)
_RGB_SPACE_RE = re.compile(rf"^rgba?\(\s*(\d+)\s+(\d+)\s+(\d+)\s*(?:/\s*{_ALPHA}\s*)?\)$")
_HSL_COMMA_RE = re.compile(
    rf"^hsla?\(\s*{_NUMBER}(?:deg)?\s*,\s*{_NUMBER}%\s*,\s*{_NUMBER}%\s*(?:,\s*{_ALPHA}\s*)?\)$"
)
_HSL_SPACE_RE = re.compile(
    rf"^hsla?\(\s*{_NUMBER}(?:deg)?\s+{_NUMBER}%\s+{_NUMBER}%\s*(?:/\s*{_ALPHA}\s*)?\)$"
)


def normalize_color(value: str | None) -> str | None:
    """Return the canonical form of a color expression, or None for empty input.

    Equivalent spellings share one canonical form: ``#ABC``, ``#aabbcc``,
    ``rgb(170,187,204)`` and ``hsl()`` spellings of the same opaque color all
    become ``#aabbcc``. Translucent colors become ``rgba(r,g,b,a)``.
    """
    if value is None:
        return None
    stripped = str(value).strip()
    if not stripped:
        return None
    lowered = stripped.lower()
    if lowered in _KEYWORDS:
        return "currentColor" if lowered == "currentcolor" else lowered
    if lowered.startswith(("url(", "var(")):
        return stripped

    hex_match = _HEX_RE.match(lowered)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(char * 2 for char in digits)
        if len(digits) == 8 and digits.endswith("ff"):
            digits = digits[:6]
        return f"#{digits}"

    rgb_match = _RGB_COMMA_RE.match(lowered) or _RGB_SPACE_RE.match(lowered)
    if rgb_match:
        red, green, blue = (_clamp_channel(int(group)) for group in rgb_match.groups()[:3])
        return _rgb_with_alpha(red, green, blue, _parse_alpha(rgb_match.group(4)))

    hsl_match = _HSL_COMMA_RE.match(lowered) or _HSL_SPACE_RE.match(lowered)
    if hsl_match:
        hue = (float(hsl_match.group(1)) % 360) / 360
        saturation = min(max(float(hsl_match.group(2)) / 100, 0.0), 1.0)
        lightness = min(max(float(hsl_match.group(3)) / 100, 0.0), 1.0)
        red, green, blue = (
            _clamp_channel(round(channel * 255))
            for channel in colorsys.hls_to_rgb(hue, lightness, saturation)
        )
        return _rgb_with_alpha(red, green, blue, _parse_alpha(hsl_match.group(4)))

    return lowered


def is_protected_color(normalized: str) -> bool:
    """True for values the rewrite pass must leave alone."""
    return (
        normalized == "currentColor"
        or normalized in _KEYWORDS
        or normalized.startswith(("url(", "var("))
    )


def normalize_color_map(color_map: Mapping[str, str]) -> dict[str, str]:
    """Normalize source keys; protected or empty keys are dropped."""
    normalized: dict[str, str] = {}
    for source, replacement in color_map.items():
        key = normalize_color(source)
        if key is None or is_protected_color(key):
            continue
        normalized[key] = str(replacement)
    return normalized


def short_hex(digits: str) -> str | None:
    """Return the 3/4-digit form of 6/8 hex digits when every channel pair is doubled."""
    if len(digits) not in (6, 8):
        return None
    pairs = [digits[index : index + 2] for index in range(0, len(digits), 2)]
    if all(pair[0] == pair[1] for pair in pairs):
        return "".join(pair[0] for pair in pairs)
    return None


def parse_style(style_text: str) -> list[tuple[str, str]]:
    """Split an inline style into ordered (property, value) pairs."""
    declarations: list[tuple[str, str]] = []
    for part in style_text.split(";"):
        stripped = part.strip()
        if not stripped:
            continue
        index = stripped.find(":")
        if index == -1:
            continue
        declarations.append((stripped[:index].strip(), stripped[index + 1 :].strip()))
    return declarations


def serialize_style(declarations: Iterable[tuple[str, str]]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in declarations)


def lookup_color(normalized_map: Mapping[str, str], raw: str | None) -> str | None:
    """Return the replacement for ``raw`` when its canonical form is mapped."""
    normalized = normalize_color(raw)
    if normalized is None or is_protected_color(normalized):
        return None
    return normalized_map.get(normalized)


def rewrite_inline_style(
    style_text: str,
    normalized_map: Mapping[str, str],
    properties: Iterable[str] = DEFAULT_COLOR_ATTRIBUTES,
) -> str | None:
    """Return the rewritten style, or None when nothing was substituted."""
    wanted = {prop.lower() for prop in properties}
    declarations = parse_style(style_text)
    changed = False
    for index, (prop, value) in enumerate(declarations):
        if prop.lower() not in wanted:
            continue
        mapped = lookup_color(normalized_map, value)
        if mapped is not None:
            declarations[index] = (prop, mapped)
            changed = True
    return serialize_style(declarations) if changed else None


def replace_in_css_text(css_text: str, normalized_map: Mapping[str, str]) -> str:
    """Substitute hex literals in stylesheet text, case-insensitively.

    Both the full and (where valid) short spelling of each mapped hex color
    are replaced. A literal that continues with more hex digits is a different
    color and is never touched, so ``#aabbcc`` does not rewrite ``#aabbcc80``.
    """
    text = css_text
    for source, replacement in normalized_map.items():
        if not source.startswith("#"):
            continue
        digits = source[1:]
        spellings = [digits]
        short = short_hex(digits)
        if short is not None:
            spellings.append(short)
        for spelling in spellings:
            pattern = re.compile(rf"#{spelling}(?![0-9a-f])", re.IGNORECASE)
            text = pattern.sub(lambda _match: replacement, text)
    return text


def rewrite_colors(
    root: ET.Element,
    color_map: Mapping[str, str],
    *,
    attributes: Iterable[str] = DEFAULT_COLOR_ATTRIBUTES,
    replace_inline_style: bool = True,
    replace_style_element_text: bool = False,
) -> int:
    """Rewrite mapped colors across the tree in place; return the substitution count."""
    normalized_map = normalize_color_map(color_map)
    if not normalized_map:
        return 0
    attribute_names = tuple(attributes) or DEFAULT_COLOR_ATTRIBUTES
    substitutions = 0
    for element in root.iter():
        if not is_element(element):
            continue
        for name in attribute_names:
            if name not in element.attrib:
                continue
            mapped = lookup_color(normalized_map, element.attrib[name])
            if mapped is not None:
                element.set(name, mapped)
                substitutions += 1

        style_text = element.get("style")
        if replace_inline_style and style_text:
            rewritten = rewrite_inline_style(style_text, normalized_map, attribute_names)
            if rewritten is not None:
                element.set("style", rewritten)
                substitutions += 1

        if replace_style_element_text and local_name(element.tag) == "style" and element.text:
            rewritten_css = replace_in_css_text(element.text, normalized_map)
            if rewritten_css != element.text:
                element.text = rewritten_css
                substitutions += 1
    return substitutions


def _clamp_channel(value: int) -> int:
    return max(0, min(255, value))


def _parse_alpha(raw: str | None) -> float:
    if raw is None:
        return 1.0
    if raw.endswith("%"):
        alpha = float(raw[:-1]) / 100
    else:
        alpha = float(raw)
    return min(max(alpha, 0.0), 1.0)


def _rgb_with_alpha(red: int, green: int, blue: int, alpha: float) -> str:
    if alpha == 1.0:
        return f"#{red:02x}{green:02x}{blue:02x}"
    return f"rgba({red},{green},{blue},{round(alpha, 4):g})"
