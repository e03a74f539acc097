"""
Template Input Schema.

Compact inputs that expand into catalog documents. The set of template kinds
is closed: each kind is tagged by its ``schema`` value and parsed through one
discriminated union.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

SEMVER_SCHEMA = "olm.semver"
SUBSTITUTES_SCHEMA = "olm.template.substitutes"


class TemplateSchema(StrEnum):
    """Supported template kinds."""

    SEMVER = SEMVER_SCHEMA
    SUBSTITUTES = SUBSTITUTES_SCHEMA


class Archetype(StrEnum):
    """Channel stability tiers, least stable first."""

    CANDIDATE = "candidate"
    FAST = "fast"
    STABLE = "stable"


class StreamType(StrEnum):
    """Channel naming granularity."""

    MAJOR = "major"
    MINOR = "minor"


class SemverBundleEntry(BaseModel):
    """Bundle image reference listed in a semver archetype."""

    model_config = ConfigDict(extra="forbid")

    image: str = Field(min_length=1)


class SemverChannelBundles(BaseModel):
    """Bundles listed under one archetype."""

    model_config = ConfigDict(extra="forbid")

    bundles: list[SemverBundleEntry] = Field(default_factory=list)


class SemverTemplateData(BaseModel):
    """Semver template: per-archetype bundle lists plus generation switches."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    template_schema: Literal["olm.semver"] = Field(alias="schema")
    generate_major_channels: bool = Field(default=False, alias="generateMajorChannels")
    generate_minor_channels: bool = Field(default=False, alias="generateMinorChannels")
    default_channel_type_preference: StreamType | None = Field(
        default=None,
        alias="defaultChannelTypePreference",
    )
    candidate: SemverChannelBundles = Field(default_factory=SemverChannelBundles)
    fast: SemverChannelBundles = Field(default_factory=SemverChannelBundles)
    stable: SemverChannelBundles = Field(default_factory=SemverChannelBundles)

    def archetype_bundles(self, archetype: Archetype) -> list[SemverBundleEntry]:
        return getattr(self, archetype.value).bundles

    def bundle_images(self) -> list[str]:
        """Unique image references across all archetypes, first-seen order."""

        seen: dict[str, None] = {}
        for archetype in Archetype:
            for entry in self.archetype_bundles(archetype):
                seen.setdefault(entry.image, None)
        return list(seen)


class Substitute(BaseModel):
    """Replacement of an existing bundle (``base``) by a new bundle image (``name``)."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="", description="Image reference of the replacement bundle")
    base: str = Field(default="", description="Name of the bundle being superseded")


class SubstitutesTemplateData(BaseModel):
    """Substitutes template: an existing catalog plus ordered substitutions."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    template_schema: Literal["olm.template.substitutes"] = Field(alias="schema")
    entries: list[dict[str, Any]] = Field(default_factory=list)
    substitutions: list[Substitute] = Field(default_factory=list)


TemplateData = Annotated[
    SemverTemplateData | SubstitutesTemplateData,
    Field(discriminator="template_schema"),
]


_TEMPLATE_ADAPTER: TypeAdapter[SemverTemplateData | SubstitutesTemplateData] = TypeAdapter(TemplateData)


def parse_template(raw: dict[str, Any]) -> SemverTemplateData | SubstitutesTemplateData:
    """Parse and validate a raw template payload by its ``schema`` tag."""

    return _TEMPLATE_ADAPTER.validate_python(raw)


__all__ = [
    "Archetype",
    "SEMVER_SCHEMA",
    "SUBSTITUTES_SCHEMA",
    "SemverBundleEntry",
    "SemverChannelBundles",
    "SemverTemplateData",
    "StreamType",
    "Substitute",
    "SubstitutesTemplateData",
    "TemplateData",
    "TemplateSchema",
    "parse_template",
]
