"""Channel synthesis for the semver template.

Creates the major- and/or minor-grain channels for every classified bundle,
records where each bare entry landed for the linking pass, and tracks the
most stable channel head seen so far to pick the package default channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import semver

from catalog_templates.core.version import compare_versions, version_sort_key
from catalog_templates.schemas.declcfg import Channel, ChannelEntry
from catalog_templates.schemas.templates import Archetype, SemverTemplateData, StreamType
from catalog_templates.templates.errors import SchemaMismatchError
from catalog_templates.templates.semver.versions import (
    ARCHETYPE_PRIORITY,
    ARCHETYPES_BY_PRIORITY,
    BundleVersions,
)

logger = logging.getLogger(__name__)

# Intrinsic preference: minor channels win ties, an unset kind loses to both.
STREAM_TYPE_PRIORITY: dict[StreamType | None, int] = {
    None: 0,
    StreamType.MAJOR: 1,
    StreamType.MINOR: 2,
}


@dataclass(frozen=True)
class ChannelGenerationOptions:
    """Resolved channel generation switches of a semver template."""

    generate_major: bool
    generate_minor: bool
    default_channel_type_preference: StreamType

    def stream_types(self) -> list[StreamType]:
        kinds: list[StreamType] = []
        if self.generate_major:
            kinds.append(StreamType.MAJOR)
        if self.generate_minor:
            kinds.append(StreamType.MINOR)
        return kinds


def resolve_generation_options(template: SemverTemplateData) -> ChannelGenerationOptions:
    """
    Resolve generation switches and the default channel type preference.

    Minor channels are generated when neither switch is set. An unset
    preference follows the single enabled mode and must be given explicitly
    when both modes are enabled.

    Raises:
        SchemaMismatchError: If the preference names a disabled mode, or is
            missing while both modes are enabled
    """
    generate_major = template.generate_major_channels
    generate_minor = template.generate_minor_channels
    if not generate_major and not generate_minor:
        generate_minor = True

    preference = template.default_channel_type_preference
    if preference is None:
        if generate_major and generate_minor:
            raise SchemaMismatchError(
                "defaultChannelTypePreference",
                "schema attribute mismatch: defaultChannelTypePreference must be set "
                "when generating both major-version and minor-version channels",
            )
        preference = StreamType.MINOR if generate_minor else StreamType.MAJOR
    elif preference == StreamType.MINOR and not generate_minor:
        raise SchemaMismatchError(
            "defaultChannelTypePreference",
            "schema attribute mismatch: defaultChannelTypePreference set to 'minor' "
            "doesn't make sense if not generating minor-version channels",
        )
    elif preference == StreamType.MAJOR and not generate_major:
        raise SchemaMismatchError(
            "defaultChannelTypePreference",
            "schema attribute mismatch: defaultChannelTypePreference set to 'major' "
            "doesn't make sense if not generating major-version channels",
        )

    return ChannelGenerationOptions(
        generate_major=generate_major,
        generate_minor=generate_minor,
        default_channel_type_preference=preference,
    )


def channel_name(archetype: Archetype, stream_type: StreamType, version: semver.Version) -> str:
    if stream_type == StreamType.MAJOR:
        return f"{archetype.value}-v{version.major}"
    return f"{archetype.value}-v{version.major}.{version.minor}"


@dataclass(frozen=True)
class HighwaterChannel:
    """Most stable channel head seen so far."""

    archetype: Archetype
    version: semver.Version
    name: str = ""
    stream_type: StreamType | None = None

    def outranks(self, incumbent: HighwaterChannel, preference: StreamType) -> bool:
        """Whether this channel should replace ``incumbent`` as the default.

        Prefers, in order: the more stable archetype, the higher version, the
        preferred stream type, then the stream type with higher priority.
        """
        if ARCHETYPE_PRIORITY[self.archetype] != ARCHETYPE_PRIORITY[incumbent.archetype]:
            return ARCHETYPE_PRIORITY[self.archetype] > ARCHETYPE_PRIORITY[incumbent.archetype]

        result = compare_versions(self.version, incumbent.version)
        if result != 0:
            return result > 0

        if self.stream_type != incumbent.stream_type:
            if self.stream_type == preference:
                return True
            if incumbent.stream_type == preference:
                return False
            return STREAM_TYPE_PRIORITY[self.stream_type] > STREAM_TYPE_PRIORITY[incumbent.stream_type]

        return False


@dataclass(frozen=True)
class EntryTuple:
    """Position of one provisional channel entry, consumed by the linker."""

    archetype: Archetype
    stream_type: StreamType
    channel: str
    name: str
    version: semver.Version
    index: int


@dataclass
class ChannelSynthesis:
    """Unlinked channels plus the linking worklist."""

    channels: dict[str, Channel] = field(default_factory=dict)
    entries: list[EntryTuple] = field(default_factory=list)
    default_channel: str = ""


def synthesize_channels(
    package: str,
    versions: BundleVersions,
    options: ChannelGenerationOptions,
) -> ChannelSynthesis:
    """
    Create bare channel entries for every bundle and pick the default channel.

    Archetypes are walked from least to most stable and bundles in ascending
    version order, so each channel's entries are created in version order.
    """
    result = ChannelSynthesis()
    highwater = HighwaterChannel(archetype=ARCHETYPES_BY_PRIORITY[0], version=semver.Version(0, 0, 0))
    stream_types = options.stream_types()

    for archetype in ARCHETYPES_BY_PRIORITY:
        bundles = versions.get(archetype, {})
        if not bundles:
            continue

        ordered = sorted(bundles, key=lambda name: (version_sort_key(bundles[name]), name))
        for bundle_name in ordered:
            version = bundles[bundle_name]
            for stream_type in stream_types:
                name = channel_name(archetype, stream_type, version)
                channel = result.channels.get(name)
                if channel is None:
                    channel = Channel(name=name, package=package)
                    result.channels[name] = channel
                    logger.debug(f"Created channel {name} at {bundle_name}")

                    challenger = HighwaterChannel(
                        archetype=archetype,
                        version=version,
                        name=name,
                        stream_type=stream_type,
                    )
                    if challenger.outranks(highwater, options.default_channel_type_preference):
                        highwater = challenger

                channel.entries.append(ChannelEntry(name=bundle_name))
                result.entries.append(
                    EntryTuple(
                        archetype=archetype,
                        stream_type=stream_type,
                        channel=name,
                        name=bundle_name,
                        version=version,
                        index=len(channel.entries) - 1,
                    )
                )

    result.default_channel = highwater.name
    logger.info(f"Synthesized {len(result.channels)} channels for {package}, default channel {highwater.name!r}")
    return result


__all__ = [
    "ChannelGenerationOptions",
    "ChannelSynthesis",
    "EntryTuple",
    "HighwaterChannel",
    "STREAM_TYPE_PRIORITY",
    "channel_name",
    "resolve_generation_options",
    "synthesize_channels",
]
