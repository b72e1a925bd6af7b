"""Pluggable SVG optimizer with an svgo-style plugin list."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from iconoma.errors import ValidationError
from iconoma.svg.colors import (
    DEFAULT_COLOR_ATTRIBUTES,
    is_protected_color,
    normalize_color,
    parse_style,
    rewrite_colors,
    serialize_style,
    short_hex,
)
from iconoma.svg.document import (
    is_element,
    local_name,
    namespace_of,
    parse_svg,
    remove_matching,
    serialize_svg,
)

MAX_PASSES = 10

EDITOR_NAMESPACES = frozenset(
    {
        "http://inkscape.sourceforge.net/DTD/sodipodi-0.dtd",
        "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
        "http://www.inkscape.org/namespaces/inkscape",
        "http://www.bohemiancoding.com/sketch/ns",
        "http://ns.adobe.com/AdobeIllustrator/10.0/",
        "http://ns.adobe.com/Graphs/1.0/",
        "http://ns.adobe.com/AdobeSVGViewerExtensions/3.0/",
        "http://ns.adobe.com/Variables/1.0/",
        "http://ns.adobe.com/SaveForWeb/1.0/",
        "http://ns.adobe.com/Extensibility/1.0/",
        "http://ns.adobe.com/Flows/1.0/",
        "http://ns.adobe.com/ImageReplacement/1.0/",
        "http://ns.adobe.com/GenericCustomNamespace/1.0/",
        "http://ns.adobe.com/XPath/1.0/",
        "http://schemas.microsoft.com/visio/2003/SVGExtensions/",
        "http://www.figma.com/figma/ns",
        "http://www.serif.com/",
        "http://www.vector.evaxdesign.sk",
    }
)

PRESENTATION_ATTRIBUTES = frozenset(
    {
        "clip-path",
        "clip-rule",
        "color",
        "display",
        "fill",
        "fill-opacity",
        "fill-rule",
        "filter",
        "flood-color",
        "flood-opacity",
        "font-family",
        "font-size",
        "font-style",
        "font-weight",
        "lighting-color",
        "marker-end",
        "marker-mid",
        "marker-start",
        "mask",
        "opacity",
        "stop-color",
        "stop-opacity",
        "stroke",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
        "text-anchor",
        "visibility",
    }
)

EMPTY_REMOVABLE_CONTAINERS = frozenset({"g", "defs", "symbol", "switch", "a"})

SORT_ATTRS_ORDER = (
    "id",
    "width",
    "height",
    "x",
    "x1",
    "x2",
    "y",
    "y1",
    "y2",
    "cx",
    "cy",
    "r",
    "fill",
    "stroke",
    "marker",
    "d",
    "points",
)

DEFAULT_PRESET: tuple[str, ...] = (
    "removeComments",
    "removeMetadata",
    "removeEditorsNSData",
    "cleanupAttrs",
    "removeDesc",
    "removeEmptyContainers",
    "convertColors",
)

_LENGTH_RE = re.compile(r"^(\d*\.?\d+)(px)?$")


class OptimizerPlugin(Protocol):
    """Protocol implemented by optimizer plugins."""

    name: str

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        """Transform the tree in place."""


class RemoveComments:
    """Drop comments, keeping ``<!--! legal -->`` comments."""

    name = "removeComments"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        keep_legal = params.get("preserveLegal", True) is not False
        remove_matching(
            root,
            lambda node: node.tag is ET.Comment
            and not (keep_legal and (node.text or "").startswith("!")),
        )


@dataclass(slots=True, frozen=True)
class RemoveElementsNamed:
    name: str
    element_name: str

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        remove_matching(root, lambda node: local_name(node.tag) == self.element_name)


class RemoveEditorsNSData:
    name = "removeEditorsNSData"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        extra = params.get("additionalNamespaces", [])
        namespaces = set(EDITOR_NAMESPACES)
        if isinstance(extra, list):
            namespaces.update(item for item in extra if isinstance(item, str))
        remove_matching(
            root,
            lambda node: is_element(node) and namespace_of(node.tag) in namespaces,
        )
        for element in root.iter():
            for attribute in list(element.attrib):
                if namespace_of(attribute) in namespaces:
                    del element.attrib[attribute]


class CleanupAttrs:
    """Collapse whitespace runs inside attribute values."""

    name = "cleanupAttrs"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        for element in root.iter():
            for attribute, value in list(element.attrib.items()):
                element.set(attribute, re.sub(r"\s+", " ", value).strip())


class RemoveDimensions:
    """Drop width/height from the root, deriving a viewBox when missing."""

    name = "removeDimensions"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        width = root.get("width")
        height = root.get("height")
        if root.get("viewBox") is None:
            width_match = _LENGTH_RE.match(width or "")
            height_match = _LENGTH_RE.match(height or "")
            if width_match is None or height_match is None:
                return
            root.set("viewBox", f"0 0 {width_match.group(1)} {height_match.group(1)}")
        root.attrib.pop("width", None)
        root.attrib.pop("height", None)


class RemoveEmptyContainers:
    name = "removeEmptyContainers"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        self._prune(root)

    def _prune(self, parent: ET.Element) -> None:
        for child in list(parent):
            if not is_element(child):
                continue
            self._prune(child)
            if (
                local_name(child.tag) in EMPTY_REMOVABLE_CONTAINERS
                and len(child) == 0
                and not (child.text or "").strip()
                and child.get("id") is None
                and child.get("filter") is None
            ):
                parent.remove(child)


class ConvertColors:
    """Rewrite color attributes to their shortest canonical spelling."""

    name = "convertColors"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        if params.get("currentColor") is True:
            raise ValidationError(
                "convertColors.currentColor is not supported; map colors through color variables."
            )
        use_short_hex = params.get("shorthex", True) is not False
        for element in root.iter():
            if not is_element(element):
                continue
            for attribute in DEFAULT_COLOR_ATTRIBUTES:
                value = element.get(attribute)
                if value is None:
                    continue
                element.set(attribute, _convert_color(value, use_short_hex))


class ConvertStyleToAttrs:
    """Move presentation declarations from ``style`` into attributes."""

    name = "convertStyleToAttrs"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        for element in root.iter():
            if not is_element(element):
                continue
            style_text = element.get("style")
            if style_text is None:
                continue
            remaining: list[tuple[str, str]] = []
            for prop, value in parse_style(style_text):
                lowered = prop.lower()
                if lowered in PRESENTATION_ATTRIBUTES and "!important" not in value:
                    element.set(lowered, value)
                else:
                    remaining.append((prop, value))
            if remaining:
                element.set("style", serialize_style(remaining))
            else:
                del element.attrib["style"]


class SortAttrs:
    name = "sortAttrs"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        order = {name: index for index, name in enumerate(SORT_ATTRS_ORDER)}
        fallback = len(order)
        for element in root.iter():
            if not is_element(element) or len(element.attrib) < 2:
                continue
            items = sorted(
                element.attrib.items(),
                key=lambda item: (order.get(local_name(item[0]), fallback), item[0]),
            )
            element.attrib.clear()
            element.attrib.update(items)


class MapColors:
    """Substitute literal colors with configured expressions (color variables)."""

    name = "mapColors"

    def apply(self, root: ET.Element, params: Mapping[str, object]) -> None:
        color_map = params.get("map", {})
        if not isinstance(color_map, Mapping):
            raise ValidationError("mapColors.map must be an object of color -> replacement.")
        attributes = params.get("attributes")
        rewrite_colors(
            root,
            {str(key): str(value) for key, value in color_map.items()},
            attributes=(
                tuple(str(item) for item in attributes)
                if isinstance(attributes, list) and attributes
                else DEFAULT_COLOR_ATTRIBUTES
            ),
            replace_inline_style=params.get("replaceInlineStyle", True) is not False,
            replace_style_element_text=params.get("replaceStyleElementText", False) is True,
        )


@dataclass(slots=True)
class PluginRegistry:
    """Optimizer plugins by name, in deterministic registration order."""

    _plugins: dict[str, OptimizerPlugin] = field(default_factory=dict)

    def register(self, plugin: OptimizerPlugin) -> None:
        self._plugins[plugin.name] = plugin

    def get(self, name: str) -> OptimizerPlugin:
        plugin = self._plugins.get(name)
        if plugin is None:
            raise ValidationError(f"Unknown optimizer plugin: {name}")
        return plugin

    def names(self) -> tuple[str, ...]:
        return tuple(self._plugins.keys())


def build_plugin_registry() -> PluginRegistry:
    """Registry holding every built-in plugin."""
    registry = PluginRegistry()
    registry.register(RemoveComments())
    registry.register(RemoveElementsNamed(name="removeMetadata", element_name="metadata"))
    registry.register(RemoveElementsNamed(name="removeTitle", element_name="title"))
    registry.register(RemoveElementsNamed(name="removeDesc", element_name="desc"))
    registry.register(RemoveEditorsNSData())
    registry.register(CleanupAttrs())
    registry.register(RemoveDimensions())
    registry.register(RemoveEmptyContainers())
    registry.register(ConvertColors())
    registry.register(ConvertStyleToAttrs())
    registry.register(SortAttrs())
    registry.register(MapColors())
    return registry


OptimizerStep = tuple[str, Mapping[str, object]]


class SvgOptimizer:
    """Runs an optimizer config (``{"plugins": [...], "multipass": bool}``) over markup."""

    def __init__(self, registry: PluginRegistry | None = None) -> None:
        self._registry = registry or build_plugin_registry()

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    def resolve_steps(self, optimizer_config: Mapping[str, object]) -> list[OptimizerStep]:
        """Expand presets and normalize plugin entries to (name, params) pairs."""
        raw_plugins = optimizer_config.get("plugins", [])
        if not isinstance(raw_plugins, list):
            raise ValidationError("Optimizer 'plugins' must be a list.")
        steps: list[OptimizerStep] = []
        for entry in raw_plugins:
            if isinstance(entry, str):
                name, params = entry, {}
            elif isinstance(entry, dict) and isinstance(entry.get("name"), str):
                name = entry["name"]
                raw_params = entry.get("params", {})
                params = raw_params if isinstance(raw_params, dict) else {}
            else:
                raise ValidationError("Optimizer plugins must be names or {name, params} objects.")
            if name == "preset-default":
                steps.extend(_expand_preset(params))
                continue
            self._registry.get(name)
            steps.append((name, params))
        return steps

    def run(self, root: ET.Element, steps: Sequence[OptimizerStep]) -> None:
        for name, params in steps:
            self._registry.get(name).apply(root, params)

    def optimize(
        self,
        raw_svg: str,
        optimizer_config: Mapping[str, object],
        extra_steps: Sequence[OptimizerStep] = (),
    ) -> str:
        """Return canonical markup after the configured plugins and ``extra_steps``."""
        steps = self.resolve_steps(optimizer_config) + list(extra_steps)
        passes = MAX_PASSES if optimizer_config.get("multipass") is True else 1
        output = raw_svg
        for _ in range(passes):
            root = parse_svg(output)
            self.run(root, steps)
            optimized = serialize_svg(root)
            if optimized == output:
                break
            output = optimized
        return output


def _expand_preset(params: Mapping[str, object]) -> list[OptimizerStep]:
    overrides = params.get("overrides", {})
    if not isinstance(overrides, dict):
        raise ValidationError("preset-default overrides must be an object.")
    steps: list[OptimizerStep] = []
    for name in DEFAULT_PRESET:
        override = overrides.get(name)
        if override is False:
            continue
        steps.append((name, override if isinstance(override, dict) else {}))
    return steps


def _convert_color(value: str, use_short_hex: bool) -> str:
    normalized = normalize_color(value)
    if normalized is None or is_protected_color(normalized):
        return value
    if normalized.startswith("#") and use_short_hex:
        short = short_hex(normalized[1:])
        if short is not None:
            return f"#{short}"
    if normalized.startswith(("#", "rgba(")):
        return normalized
    return value


