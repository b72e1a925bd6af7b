"""React and React Native component targets."""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

from iconoma.security.paths import remove_empty_parent, resolve_project_path
from iconoma.store.models import Icon
from iconoma.svg.document import is_element, local_name, parse_svg

ReadSvg = Callable[[Icon], str]

INDENT = "  "

_ATTRIBUTE_RENAMES = {
    "class": "className",
    "for": "htmlFor",
    "tabindex": "tabIndex",
}

_NAMESPACED_PREFIXES = {
    "http://www.w3.org/1999/xlink": "xlink",
    "http://www.w3.org/XML/1998/namespace": "xml",
}

# Elements react-native-svg exports, keyed by SVG local name.
NATIVE_ELEMENTS = {
    "svg": "Svg",
    "circle": "Circle",
    "clipPath": "ClipPath",
    "defs": "Defs",
    "ellipse": "Ellipse",
    "g": "G",
    "image": "Image",
    "line": "Line",
    "linearGradient": "LinearGradient",
    "mask": "Mask",
    "path": "Path",
    "pattern": "Pattern",
    "polygon": "Polygon",
    "polyline": "Polyline",
    "radialGradient": "RadialGradient",
    "rect": "Rect",
    "stop": "Stop",
    "symbol": "Symbol",
    "text": "Text",
    "textPath": "TextPath",
    "tspan": "TSpan",
    "use": "Use",
}


def component_name(icon_key: str) -> str:
    """PascalCase an icon key; keys starting with a digit get an ``Icon`` prefix."""
    parts = [part for part in re.split(r"[^a-zA-Z0-9]+", icon_key.strip()) if part]
    name = "".join(part[0].upper() + part[1:] for part in parts)
    if not name or name[0].isdigit():
        name = f"Icon{name}"
    return name


def camel_case(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def jsx_attribute_name(name: str) -> str:
    if name.startswith("{"):
        namespace, local = name[1:].split("}", 1)
        prefix = _NAMESPACED_PREFIXES.get(namespace)
        if prefix is None:
            return camel_case(local)
        return prefix + local[:1].upper() + local[1:]
    if name in _ATTRIBUTE_RENAMES:
        return _ATTRIBUTE_RENAMES[name]
    if name.startswith(("data-", "aria-")):
        return name
    return camel_case(name)


def jsx_attribute(name: str, value: str) -> str:
    jsx_name = jsx_attribute_name(name)
    if name == "style":
        return f"style={{{_style_object(value)}}}"
    if '"' in value or "\\" in value or "\n" in value:
        return f"{jsx_name}={{{json.dumps(value)}}}"
    return f'{jsx_name}="{value}"'


def _style_object(style_text: str) -> str:
    entries: list[str] = []
    for part in style_text.split(";"):
        prop, separator, value = part.partition(":")
        if not separator or not prop.strip():
            continue
        key = prop.strip()
        key = key if key.startswith("--") else camel_case(key.lower())
        entries.append(f"{json.dumps(key)}: {json.dumps(value.strip())}")
    return "{ " + ", ".join(entries) + " }"


class ReactComponentAdapter:
    """Writes one React component per icon; ``.tsx`` output paths get typed props."""

    def __init__(self, project_root: Path, read_svg: ReadSvg, target_id: str = "react") -> None:
        self.target_id = target_id
        self._project_root = project_root.resolve()
        self._read_svg = read_svg

    def add_icon(self, icon: Icon, icon_key: str, file_path: str) -> None:
        markup = self._read_svg(icon)
        source = self.render(markup, component_name(icon_key), file_path.endswith(".tsx"))
        path = resolve_project_path(self._project_root, file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")

    def remove_icon(self, icon: Icon, icon_key: str, file_path: str) -> None:
        path = resolve_project_path(self._project_root, file_path)
        path.unlink(missing_ok=True)
        remove_empty_parent(path, self._project_root)

    def render(self, markup: str, name: str, typescript: bool) -> str:
        """Render component source for canonical SVG markup."""
        root = parse_svg(markup)
        used: list[str] = []
        body = self._render_element(root, depth=2, used=used, is_root=True)
        lines = [*self._header(used, typescript), ""]
        props = f"props: {self._props_type()}" if typescript else "props"
        lines.append(f"const {name} = ({props}) => (")
        lines.extend(body)
        lines.append(");")
        lines.append("")
        lines.append(f"export default {name};")
        lines.append("")
        return "\n".join(lines)

    def _header(self, used: list[str], typescript: bool) -> list[str]:
        lines = ['import * as React from "react";']
        if typescript:
            lines.append('import type { SVGProps } from "react";')
        return lines

    def _props_type(self) -> str:
        return "SVGProps<SVGSVGElement>"

    def _tag(self, element: ET.Element) -> str:
        return local_name(element.tag)

    def _render_element(
        self, element: ET.Element, *, depth: int, used: list[str], is_root: bool = False
    ) -> list[str]:
        pad = INDENT * depth
        tag = self._tag(element)
        if tag not in used:
            used.append(tag)
        attributes = [
            jsx_attribute(name, value)
            for name, value in element.attrib.items()
            if not (is_root and name in ("width", "height"))
        ]
        if is_root:
            attributes = self._root_attributes(element) + attributes + ["{...props}"]
        opening = " ".join([tag, *attributes])

        children: list[str] = []
        if element.text and element.text.strip():
            children.append(f"{pad}{INDENT}{{{json.dumps(element.text)}}}")
        for child in element:
            if is_element(child):
                children.extend(self._render_element(child, depth=depth + 1, used=used))
            if child.tail and child.tail.strip():
                children.append(f"{pad}{INDENT}{{{json.dumps(child.tail)}}}")

        if not children:
            return [f"{pad}<{opening} />"]
        return [f"{pad}<{opening}>", *children, f"{pad}</{tag}>"]

    def _root_attributes(self, element: ET.Element) -> list[str]:
        return ['xmlns="http://www.w3.org/2000/svg"', 'width="1em"', 'height="1em"']


class ReactNativeComponentAdapter(ReactComponentAdapter):
    """Same component shape rendered with react-native-svg primitives."""

    def __init__(
        self, project_root: Path, read_svg: ReadSvg, target_id: str = "react-native"
    ) -> None:
        super().__init__(project_root, read_svg, target_id)

    def _header(self, used: list[str], typescript: bool) -> list[str]:
        named = sorted(tag for tag in used if tag != "Svg")
        imports = "Svg" + (", { " + ", ".join(named) + " }" if named else "")
        lines = ['import * as React from "react";', f'import {imports} from "react-native-svg";']
        if typescript:
            lines.append('import type { SvgProps } from "react-native-svg";')
        return lines

    def _props_type(self) -> str:
        return "SvgProps"

    def _tag(self, element: ET.Element) -> str:
        name = local_name(element.tag)
        return NATIVE_ELEMENTS.get(name, name[:1].upper() + name[1:])

    def _root_attributes(self, element: ET.Element) -> list[str]:
        return ['width="1em"', 'height="1em"']
