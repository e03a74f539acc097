"""
Declarative Config Schema.

Document model for file-based operator catalogs: packages, channels with
their upgrade-graph entries, and bundles. Field aliases match the wire names
used in catalog JSON/YAML documents, and empty optional fields are omitted
when a blob is dumped.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

import semver
from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

from catalog_templates.core.version import CompositeVersion, parse_version

SCHEMA_PACKAGE = "olm.package"
SCHEMA_CHANNEL = "olm.channel"
SCHEMA_BUNDLE = "olm.bundle"

PROPERTY_TYPE_PACKAGE = "olm.package"


class Property(BaseModel):
    """Typed property attached to a package, channel or bundle."""

    model_config = ConfigDict(extra="forbid")

    type: str = Field(min_length=1)
    value: Any


class PackageProperty(BaseModel):
    """Value of an ``olm.package`` bundle property."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    package_name: str = Field(alias="packageName", min_length=1)
    version: str = Field(min_length=1)
    release: str | None = None


def build_package_property(package_name: str, version: str, release: str | None = None) -> Property:
    """Build an ``olm.package`` property, validating the version string."""

    parse_version(version)
    value = PackageProperty(package_name=package_name, version=version, release=release)
    return Property(type=PROPERTY_TYPE_PACKAGE, value=value.model_dump(by_alias=True, exclude_none=True))


class CatalogBlob(BaseModel):
    """Common behaviour for top-level catalog blobs and channel entries."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Keys that are written even when empty.
    emit_when_empty: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if key in self.emit_when_empty or value not in (None, "", [], {})
        }


class Icon(BaseModel):
    """Package icon."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    data: str = Field(alias="base64data")
    media_type: str = Field(alias="mediatype")


class RelatedImage(BaseModel):
    """Image referenced by a bundle."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    image: str


class Package(CatalogBlob):
    """Package blob."""

    emit_when_empty: ClassVar[frozenset[str]] = frozenset({"defaultChannel", "default_channel"})

    schema_id: Literal["olm.package"] = Field(default=SCHEMA_PACKAGE, alias="schema")
    name: str
    default_channel: str = Field(default="", alias="defaultChannel")
    icon: Icon | None = None
    description: str | None = None
    properties: list[Property] = Field(default_factory=list)


class ChannelEntry(CatalogBlob):
    """Node of a channel's upgrade graph.

    ``replaces`` is the single direct predecessor; ``skips`` lists additional
    predecessors an installation may upgrade from directly.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    replaces: str | None = None
    skips: list[str] = Field(default_factory=list)
    skip_range: str | None = Field(default=None, alias="skipRange")

    def predecessors(self) -> list[str]:
        """Names this entry has an inbound upgrade edge from."""
        names = [self.replaces] if self.replaces else []
        return names + [skip for skip in self.skips if skip not in names]

    def clear_edges(self) -> None:
        self.replaces = None
        self.skips = []
        self.skip_range = None


class Channel(CatalogBlob):
    """Channel blob: a named upgrade path within one package."""

    emit_when_empty: ClassVar[frozenset[str]] = frozenset({"entries"})

    schema_id: Literal["olm.channel"] = Field(default=SCHEMA_CHANNEL, alias="schema")
    name: str
    package: str
    entries: list[ChannelEntry] = Field(default_factory=list)
    properties: list[Property] = Field(default_factory=list)

    def entry_names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def heads(self) -> list[ChannelEntry]:
        """Entries that no other entry of this channel upgrades from."""

        incoming: set[str] = set()
        for entry in self.entries:
            incoming.update(entry.predecessors())
        return [entry for entry in self.entries if entry.name not in incoming]

    def head(self) -> ChannelEntry:
        """Return the single channel head, or raise ValueError."""

        heads = self.heads()
        if not heads:
            raise ValueError(f"no channel head found in channel {self.name!r}")
        if len(heads) > 1:
            names = ", ".join(entry.name for entry in heads)
            raise ValueError(f"multiple channel heads found in channel {self.name!r}: {names}")
        return heads[0]


class Bundle(CatalogBlob):
    """Bundle blob: one immutable release of a package."""

    emit_when_empty: ClassVar[frozenset[str]] = frozenset({"image"})

    schema_id: Literal["olm.bundle"] = Field(default=SCHEMA_BUNDLE, alias="schema")
    name: str
    package: str = ""
    image: str = ""
    properties: list[Property] = Field(default_factory=list)
    related_images: list[RelatedImage] = Field(default_factory=list, alias="relatedImages")

    def package_properties(self) -> list[PackageProperty]:
        return [
            PackageProperty.model_validate(prop.value)
            for prop in self.properties
            if prop.type == PROPERTY_TYPE_PACKAGE
        ]

    def package_property(self) -> PackageProperty:
        """Return the bundle's only ``olm.package`` property.

        Raises:
            ValueError: If the property is missing, duplicated or malformed
        """
        props = self.package_properties()
        if len(props) != 1:
            raise ValueError(
                f"bundle {self.name!r} has {len(props)} {PROPERTY_TYPE_PACKAGE!r} properties, expected exactly 1"
            )
        return props[0]

    def version(self) -> semver.Version:
        return parse_version(self.package_property().version)

    def composite_version(self) -> CompositeVersion:
        prop = self.package_property()
        return CompositeVersion(version=parse_version(prop.version), release=prop.release)


class DeclarativeConfig(BaseModel):
    """In-memory catalog document."""

    model_config = ConfigDict(extra="forbid")

    packages: list[Package] = Field(default_factory=list)
    channels: list[Channel] = Field(default_factory=list)
    bundles: list[Bundle] = Field(default_factory=list)
    others: list[dict[str, Any]] = Field(default_factory=list)

    def merge(self, other: DeclarativeConfig) -> None:
        """Append every blob of ``other`` to this document."""

        self.packages.extend(other.packages)
        self.channels.extend(other.channels)
        self.bundles.extend(other.bundles)
        self.others.extend(other.others)

    def bundle_by_name(self, name: str) -> Bundle | None:
        for bundle in self.bundles:
            if bundle.name == name:
                return bundle
        return None

    def package_by_name(self, name: str) -> Package | None:
        for package in self.packages:
            if package.name == name:
                return package
        return None


__all__ = [
    "Bundle",
    "CatalogBlob",
    "Channel",
    "ChannelEntry",
    "DeclarativeConfig",
    "Icon",
    "Package",
    "PackageProperty",
    "Property",
    "PROPERTY_TYPE_PACKAGE",
    "RelatedImage",
    "SCHEMA_BUNDLE",
    "SCHEMA_CHANNEL",
    "SCHEMA_PACKAGE",
    "build_package_property",
]
