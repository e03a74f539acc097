"""Version classification for the semver template.

Turns rendered bundles into an ``archetype -> {bundle name -> version}``
mapping and rejects archetypes whose versions cannot be totally ordered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import semver

from catalog_templates.core.version import parse_version, strip_build_metadata
from catalog_templates.schemas.declcfg import Bundle, DeclarativeConfig
from catalog_templates.schemas.templates import Archetype, SemverTemplateData
from catalog_templates.templates.errors import (
    AmbiguousVersionOrderingError,
    DuplicateBundleError,
    InvalidVersionError,
    MissingBundleError,
    PackageMismatchError,
)

logger = logging.getLogger(__name__)

# Higher values are more stable.
ARCHETYPE_PRIORITY: dict[Archetype, int] = {
    Archetype.CANDIDATE: 0,
    Archetype.FAST: 1,
    Archetype.STABLE: 2,
}

ARCHETYPES_BY_PRIORITY: list[Archetype] = sorted(Archetype, key=ARCHETYPE_PRIORITY.__getitem__)

BundleVersions = dict[Archetype, dict[str, semver.Version]]


@dataclass(frozen=True)
class ClassifiedBundles:
    """Per-archetype bundle versions for a single package."""

    package: str
    versions: BundleVersions = field(default_factory=dict)


def bundle_version(bundle: Bundle) -> tuple[str, semver.Version]:
    """Return ``(package name, version)`` from the bundle's package property."""

    try:
        prop = bundle.package_property()
    except ValueError as exc:
        raise InvalidVersionError(bundle.name, f"parse properties for bundle {bundle.name!r}: {exc}") from exc
    try:
        version = parse_version(prop.version)
    except ValueError as exc:
        raise InvalidVersionError(
            bundle.name,
            f"bundle {bundle.name!r} has invalid version {prop.version!r}: {exc}",
        ) from exc
    return prop.package_name, version


def validate_versions(archetype: Archetype, versions: dict[str, semver.Version]) -> None:
    """Reject versions that collide once build metadata is stripped.

    An empty archetype is valid.
    """
    seen: dict[str, str] = {}
    for name in sorted(versions):
        stripped = str(strip_build_metadata(versions[name]))
        partner = seen.get(stripped)
        if partner is not None:
            raise AmbiguousVersionOrderingError(archetype.value, bundle=name, partner=partner, version=stripped)
        seen[stripped] = name


def classify_bundles(
    template: SemverTemplateData,
    rendered: dict[str, DeclarativeConfig],
) -> ClassifiedBundles:
    """
    Build the per-archetype version mapping for a semver template.

    Args:
        template: Parsed semver template
        rendered: Rendered fragment per image reference

    Returns:
        ClassifiedBundles carrying the learned package name

    Raises:
        MissingBundleError: If a listed image produced no bundle
        InvalidVersionError: If a bundle's package property is unusable
        PackageMismatchError: If bundles belong to different packages
        DuplicateBundleError: If one archetype lists a bundle twice
        AmbiguousVersionOrderingError: If versions in one archetype cannot be ordered
    """
    package: str | None = None
    versions: BundleVersions = {}

    for archetype in ARCHETYPES_BY_PRIORITY:
        entries: dict[str, semver.Version] = {}
        for index, entry in enumerate(template.archetype_bundles(archetype)):
            cfg = rendered.get(entry.image)
            if cfg is None or not cfg.bundles:
                raise MissingBundleError(
                    f"{archetype.value}.bundles[{index}]",
                    f"supplied bundle image name {entry.image!r} not found in rendered bundle images",
                )
            for bundle in cfg.bundles:
                bundle_package, version = bundle_version(bundle)
                if package is None:
                    package = bundle_package
                elif bundle_package != package:
                    raise PackageMismatchError(
                        bundle.name,
                        f"bundle {bundle.name!r} belongs to package {bundle_package!r}, expected {package!r}",
                    )
                if bundle.name in entries:
                    raise DuplicateBundleError(
                        f"{archetype.value}.bundles[{index}]",
                        f"duplicate bundle name {bundle.name!r}",
                    )
                entries[bundle.name] = version

        validate_versions(archetype, entries)
        versions[archetype] = entries
        logger.debug(f"Classified {len(entries)} bundles as {archetype.value}")

    return ClassifiedBundles(package=package or "", versions=versions)


__all__ = [
    "ARCHETYPES_BY_PRIORITY",
    "ARCHETYPE_PRIORITY",
    "BundleVersions",
    "ClassifiedBundles",
    "bundle_version",
    "classify_bundles",
    "validate_versions",
]
