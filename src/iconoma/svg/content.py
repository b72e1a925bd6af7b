"""Optimize raw markup and decide where the canonical markup lives."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from iconoma.errors import FileMissingError, ValidationError
from iconoma.security.paths import join_project_path, resolve_project_path
from iconoma.store.models import FILE_PREFIX, Config, Icon, sha256_text
from iconoma.svg.optimizer import SvgOptimizer


@dataclass(slots=True, frozen=True)
class StoredSvg:
    """Value written to ``Icon.svg``: inline markup or a ``file://`` reference, plus hash."""

    content: str
    hash: str


class SvgContentPipeline:
    """Canonicalize icon markup and move it between the lock and the svg folder."""

    def __init__(self, project_root: Path, optimizer: SvgOptimizer | None = None) -> None:
        self._project_root = project_root.resolve()
        self._optimizer = optimizer or SvgOptimizer()

    @property
    def project_root(self) -> Path:
        return self._project_root

    def optimize(
        self,
        raw_svg: str,
        optimizer_config: Mapping[str, object],
        color_map: Mapping[str, str] | None = None,
    ) -> str:
        """Run project plugins, lift inline styles, then map literal colors."""
        if not raw_svg.strip():
            raise ValidationError("SVG content is empty.")
        extra_steps: list[tuple[str, Mapping[str, object]]] = [("convertStyleToAttrs", {})]
        if color_map:
            extra_steps.append(
                (
                    "mapColors",
                    {
                        "map": dict(color_map),
                        "replaceInlineStyle": True,
                        "replaceStyleElementText": True,
                    },
                )
            )
        return self._optimizer.optimize(raw_svg, optimizer_config, extra_steps)

    def store(self, config: Config, icon_key: str, canonical_svg: str) -> StoredSvg:
        """Place canonical markup according to ``config.svg_storage``.

        The hash is always computed over the markup itself, never over the
        ``file://`` reference.
        """
        svg_hash = sha256_text(canonical_svg)
        storage = config.svg_storage
        if storage.in_lock or storage.folder is None:
            return StoredSvg(content=canonical_svg, hash=svg_hash)
        relative_path = join_project_path(storage.folder, f"{icon_key}.svg")
        self.write_file(relative_path, canonical_svg)
        return StoredSvg(content=FILE_PREFIX + relative_path, hash=svg_hash)

    def read(self, icon: Icon) -> str:
        """Return the icon's markup, following ``file://`` references."""
        relative_path = icon.svg.file_path
        if relative_path is None:
            return icon.svg.content
        return self.read_file(relative_path)

    def resolve(self, relative_path: str) -> Path:
        return resolve_project_path(self._project_root, relative_path)

    def read_file(self, relative_path: str) -> str:
        path = self.resolve(relative_path)
        if not path.is_file():
            raise FileMissingError(relative_path)
        return path.read_text(encoding="utf-8")

    def write_file(self, relative_path: str, content: str) -> Path:
        path = self.resolve(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
