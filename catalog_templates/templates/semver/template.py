"""Semver template: derive a linked channel graph from bundle versions."""

from __future__ import annotations

import logging

from catalog_templates.schemas.declcfg import DeclarativeConfig, Package
from catalog_templates.schemas.templates import SemverTemplateData
from catalog_templates.templates.errors import EmptyRenderError
from catalog_templates.templates.renderer import BundleRenderer, render_bundle, render_bundles
from catalog_templates.templates.semver.linker import link_channels
from catalog_templates.templates.semver.synthesizer import resolve_generation_options, synthesize_channels
from catalog_templates.templates.semver.versions import classify_bundles

logger = logging.getLogger(__name__)


def _collect_rendered(rendered: dict[str, DeclarativeConfig]) -> DeclarativeConfig:
    """Merge rendered fragments, keeping packages and bundles once by name."""

    out = DeclarativeConfig()
    for cfg in rendered.values():
        for package in cfg.packages:
            if out.package_by_name(package.name) is None:
                out.packages.append(package)
        for bundle in cfg.bundles:
            if out.bundle_by_name(bundle.name) is None:
                out.bundles.append(bundle)
        out.others.extend(cfg.others)
    return out


class SemverTemplate:
    """Template kind for ``olm.semver`` inputs."""

    def __init__(self, renderer: BundleRenderer, concurrency: int | None = None) -> None:
        self._renderer = renderer
        self._concurrency = concurrency

    async def render_bundle(self, image_ref: str) -> DeclarativeConfig:
        return await render_bundle(self._renderer, image_ref)

    async def render(self, data: SemverTemplateData) -> DeclarativeConfig:
        """
        Render every listed image and build the package's channel graph.

        Generation options are checked before anything is rendered. No output
        is produced unless every stage succeeds.

        Raises:
            SchemaMismatchError: If generation switches and preference conflict
            RenderFailureError: If any image fails to render
            EmptyRenderError: If no bundles were rendered at all
            TemplateError: Any classification failure
        """
        options = resolve_generation_options(data)
        rendered = await render_bundles(self._renderer, data.bundle_images(), self._concurrency)

        out = _collect_rendered(rendered)
        if not out.bundles:
            raise EmptyRenderError("bundles", "semver template rendered no bundles")

        classified = classify_bundles(data, rendered)
        synthesis = synthesize_channels(classified.package, classified.versions, options)
        out.channels = link_channels(synthesis.channels, synthesis.entries)

        package = out.package_by_name(classified.package)
        if package is None:
            package = Package(name=classified.package)
            out.packages.insert(0, package)
        package.default_channel = synthesis.default_channel

        logger.info(
            f"Rendered semver template for {classified.package}: "
            f"{len(out.bundles)} bundles, {len(out.channels)} channels"
        )
        return out


__all__ = ["SemverTemplate"]
