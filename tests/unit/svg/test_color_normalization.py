from __future__ import annotations

import pytest

from iconoma.svg.colors import normalize_color, normalize_color_map, short_hex


def test_equivalent_spellings_share_one_canonical_form() -> None:
    assert normalize_color("#ABC") == normalize_color("#aabbcc") == "#aabbcc"
    assert normalize_color("rgb(170,187,204)") == normalize_color("#aabbcc")
    assert normalize_color("rgb(170 187 204)") == "#aabbcc"
    assert normalize_color(" rgba(170, 187, 204, 1) ") == "#aabbcc"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("#abcd", "#aabbccdd"),
        ("#AABBCCFF", "#aabbcc"),
        ("#aabbcc80", "#aabbcc80"),
        ("hsl(0, 100%, 50%)", "#ff0000"),
        ("hsl(120deg 100% 25%)", "#008000"),
        ("rgba(0, 0, 0, 0.5)", "rgba(0,0,0,0.5)"),
        ("rgb(0 0 0 / 50%)", "rgba(0,0,0,0.5)"),
        ("rgb(300, 0, 0)", "#ff0000"),
        ("RED", "red"),
    ],
)
def test_normalize_color_forms(raw: str, expected: str) -> None:
    assert normalize_color(raw) == expected


@pytest.mark.parametrize("raw", ["none", "transparent", "inherit", "initial", "unset"])
def test_keywords_pass_through(raw: str) -> None:
    assert normalize_color(raw.upper()) == raw


def test_sentinels_keep_their_spelling() -> None:
    assert normalize_color("CurrentColor") == "currentColor"
    assert normalize_color("url(#Gradient)") == "url(#Gradient)"
    assert normalize_color("var(--Brand)") == "var(--Brand)"


def test_empty_values_normalize_to_none() -> None:
    assert normalize_color(None) is None
    assert normalize_color("   ") is None


def test_color_map_drops_protected_keys() -> None:
    normalized = normalize_color_map(
        {"#F00": "var(--a)", "none": "red", "currentColor": "blue", "url(#x)": "green"}
    )

    assert normalized == {"#ff0000": "var(--a)"}


def test_short_hex_requires_doubled_pairs() -> None:
    assert short_hex("aabbcc") == "abc"
    assert short_hex("aabbccdd") == "abcd"
    assert short_hex("aabbcd") is None
    assert short_hex("abc") is None
