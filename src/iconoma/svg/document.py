"""SVG parsing and canonical serialization on top of ElementTree."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable

from iconoma.errors import ValidationError

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)

# Elements whose character data is content, not formatting.
TEXT_CONTENT_ELEMENTS = frozenset({"text", "tspan", "textPath", "style", "title", "desc", "script"})


def local_name(tag: object) -> str:
    """Return the tag or attribute name without its ``{namespace}`` prefix."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def namespace_of(name: str) -> str | None:
    if not name.startswith("{"):
        return None
    return name[1:].split("}", 1)[0]


def is_element(node: ET.Element) -> bool:
    """False for comments and processing instructions, whose tag is a factory function."""
    return isinstance(node.tag, str)


def parse_svg(markup: str) -> ET.Element:
    """Parse markup into a tree, keeping comments so plugins decide their fate."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        root = ET.fromstring(markup, parser=parser)
    except ET.ParseError as error:
        raise ValidationError(f"SVG markup could not be parsed: {error}.") from error
    if local_name(root.tag) != "svg":
        raise ValidationError(f"SVG root element must be <svg>, found <{local_name(root.tag)}>.")
    return root


def serialize_svg(root: ET.Element) -> str:
    """Serialize a tree to canonical markup without formatting whitespace."""
    _strip_formatting_whitespace(root, preserve=False)
    return ET.tostring(root, encoding="unicode")


def detach(parent: ET.Element, child: ET.Element) -> None:
    """Remove ``child`` while keeping any meaningful tail text in place."""
    tail = child.tail
    if tail and tail.strip():
        children = list(parent)
        index = children.index(child)
        if index > 0:
            previous = children[index - 1]
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(child)


def remove_matching(root: ET.Element, predicate: Callable[[ET.Element], bool]) -> int:
    """Detach every descendant for which ``predicate(node)`` is true."""
    removed = 0
    for parent in list(root.iter()):
        for child in list(parent):
            if predicate(child):
                detach(parent, child)
                removed += 1
    return removed


def _strip_formatting_whitespace(node: ET.Element, preserve: bool) -> None:
    keep_text = preserve or local_name(node.tag) in TEXT_CONTENT_ELEMENTS
    if not keep_text and node.text is not None and not node.text.strip():
        node.text = None
    for child in node:
        _strip_formatting_whitespace(child, keep_text)
        if not keep_text and child.tail is not None and not child.tail.strip():
            child.tail = None
