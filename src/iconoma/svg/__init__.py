"""SVG canonicalization, color rewriting, and storage placement."""

from .colors import DEFAULT_COLOR_ATTRIBUTES, normalize_color, rewrite_colors
from .content import StoredSvg, SvgContentPipeline
from .document import parse_svg, serialize_svg
from .optimizer import OptimizerPlugin, PluginRegistry, SvgOptimizer, build_plugin_registry

__all__ = [
    "DEFAULT_COLOR_ATTRIBUTES",
    "OptimizerPlugin",
    "PluginRegistry",
    "StoredSvg",
    "SvgContentPipeline",
    "SvgOptimizer",
    "build_plugin_registry",
    "normalize_color",
    "parse_svg",
    "rewrite_colors",
    "serialize_svg",
]
