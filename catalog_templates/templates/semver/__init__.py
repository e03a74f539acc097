"""Semver template: version classification, channel synthesis and linking."""

from catalog_templates.templates.semver.linker import link_channels
from catalog_templates.templates.semver.synthesizer import (
    ChannelGenerationOptions,
    resolve_generation_options,
    synthesize_channels,
)
from catalog_templates.templates.semver.template import SemverTemplate
from catalog_templates.templates.semver.versions import classify_bundles

__all__ = [
    "ChannelGenerationOptions",
    "SemverTemplate",
    "classify_bundles",
    "link_channels",
    "resolve_generation_options",
    "synthesize_channels",
]
