"""Tests for semver channel synthesis and default channel selection."""

from typing import Any

import pytest
import semver

from catalog_templates.schemas.templates import Archetype, SemverTemplateData, StreamType
from catalog_templates.templates.errors import SchemaMismatchError
from catalog_templates.templates.semver.synthesizer import (
    ChannelGenerationOptions,
    HighwaterChannel,
    channel_name,
    resolve_generation_options,
    synthesize_channels,
)


def _data(**overrides: Any) -> SemverTemplateData:
    raw: dict[str, Any] = {"schema": "olm.semver"}
    raw.update(overrides)
    return SemverTemplateData.model_validate(raw)


def _versions(**archetypes: dict[str, str]) -> dict[Archetype, dict[str, semver.Version]]:
    return {
        Archetype(archetype): {name: semver.Version.parse(version) for name, version in bundles.items()}
        for archetype, bundles in archetypes.items()
    }


MAJOR_ONLY = ChannelGenerationOptions(
    generate_major=True,
    generate_minor=False,
    default_channel_type_preference=StreamType.MAJOR,
)


class TestResolveGenerationOptions:
    def test_defaults_to_minor_channels(self) -> None:
        options = resolve_generation_options(_data())

        assert options.stream_types() == [StreamType.MINOR]
        assert options.default_channel_type_preference == StreamType.MINOR

    def test_single_mode_sets_preference(self) -> None:
        options = resolve_generation_options(_data(generateMajorChannels=True))

        assert options.stream_types() == [StreamType.MAJOR]
        assert options.default_channel_type_preference == StreamType.MAJOR

    def test_both_modes_require_preference(self) -> None:
        with pytest.raises(SchemaMismatchError, match="schema attribute mismatch"):
            resolve_generation_options(_data(generateMajorChannels=True, generateMinorChannels=True))

    def test_both_modes_with_preference(self) -> None:
        options = resolve_generation_options(
            _data(generateMajorChannels=True, generateMinorChannels=True, defaultChannelTypePreference="minor")
        )

        assert options.stream_types() == [StreamType.MAJOR, StreamType.MINOR]
        assert options.default_channel_type_preference == StreamType.MINOR

    def test_preference_for_disabled_minor_mode(self) -> None:
        with pytest.raises(SchemaMismatchError, match="SCHEMA_MISMATCH \\(defaultChannelTypePreference\\)"):
            resolve_generation_options(_data(generateMajorChannels=True, defaultChannelTypePreference="minor"))

    def test_preference_for_disabled_major_mode(self) -> None:
        with pytest.raises(SchemaMismatchError, match="'major'"):
            resolve_generation_options(_data(generateMinorChannels=True, defaultChannelTypePreference="major"))


def test_channel_names() -> None:
    version = semver.Version.parse("2.3.4-rc.1")

    assert channel_name(Archetype.STABLE, StreamType.MAJOR, version) == "stable-v2"
    assert channel_name(Archetype.FAST, StreamType.MINOR, version) == "fast-v2.3"


class TestHighwaterChannel:
    def _channel(self, archetype: Archetype, version: str, stream_type: StreamType | None) -> HighwaterChannel:
        return HighwaterChannel(archetype=archetype, version=semver.Version.parse(version), stream_type=stream_type)

    def test_archetype_beats_version(self) -> None:
        stable = self._channel(Archetype.STABLE, "1.0.0", StreamType.MAJOR)
        candidate = self._channel(Archetype.CANDIDATE, "9.0.0", StreamType.MAJOR)

        assert stable.outranks(candidate, StreamType.MAJOR)
        assert not candidate.outranks(stable, StreamType.MAJOR)

    def test_version_beats_preference(self) -> None:
        newer = self._channel(Archetype.FAST, "1.1.0", StreamType.MINOR)
        older = self._channel(Archetype.FAST, "1.0.0", StreamType.MAJOR)

        assert newer.outranks(older, StreamType.MAJOR)

    def test_build_metadata_does_not_break_ties(self) -> None:
        left = self._channel(Archetype.FAST, "1.0.0+b", StreamType.MINOR)
        right = self._channel(Archetype.FAST, "1.0.0+a", StreamType.MINOR)

        assert not left.outranks(right, StreamType.MINOR)

    def test_preference_breaks_version_tie(self) -> None:
        major = self._channel(Archetype.STABLE, "1.0.0", StreamType.MAJOR)
        minor = self._channel(Archetype.STABLE, "1.0.0", StreamType.MINOR)

        assert major.outranks(minor, StreamType.MAJOR)
        assert not minor.outranks(major, StreamType.MAJOR)
        assert minor.outranks(major, StreamType.MINOR)

    def test_intrinsic_priority_when_preference_absent(self) -> None:
        major = self._channel(Archetype.STABLE, "1.0.0", StreamType.MAJOR)
        unset = self._channel(Archetype.STABLE, "1.0.0", None)

        assert major.outranks(unset, StreamType.MINOR)
        assert not unset.outranks(major, StreamType.MINOR)


class TestSynthesizeChannels:
    def test_single_major_channel(self) -> None:
        result = synthesize_channels("a", _versions(stable={"a-v0.1.1": "0.1.1", "a-v0.1.0": "0.1.0"}), MAJOR_ONLY)

        assert list(result.channels) == ["stable-v0"]
        channel = result.channels["stable-v0"]
        assert channel.package == "a"
        assert channel.entry_names() == ["a-v0.1.0", "a-v0.1.1"]
        assert all(entry.replaces is None and entry.skips == [] for entry in channel.entries)
        assert [(e.channel, e.name, e.index) for e in result.entries] == [
            ("stable-v0", "a-v0.1.0", 0),
            ("stable-v0", "a-v0.1.1", 1),
        ]
        assert result.default_channel == "stable-v0"

    def test_major_and_minor_channels(self) -> None:
        options = ChannelGenerationOptions(
            generate_major=True,
            generate_minor=True,
            default_channel_type_preference=StreamType.MINOR,
        )
        versions = _versions(fast={"a-v1.0.0": "1.0.0", "a-v1.1.0": "1.1.0", "a-v2.0.0": "2.0.0"})

        result = synthesize_channels("a", versions, options)

        assert sorted(result.channels) == ["fast-v1", "fast-v1.0", "fast-v1.1", "fast-v2", "fast-v2.0"]
        assert result.channels["fast-v1"].entry_names() == ["a-v1.0.0", "a-v1.1.0"]
        assert result.channels["fast-v1.1"].entry_names() == ["a-v1.1.0"]
        assert result.default_channel == "fast-v2.0"

    def test_default_prefers_most_stable_archetype(self) -> None:
        versions = _versions(
            candidate={"a-v3.0.0-rc.1": "3.0.0-rc.1"},
            fast={"a-v2.0.0": "2.0.0"},
            stable={"a-v1.0.0": "1.0.0"},
        )

        result = synthesize_channels("a", versions, MAJOR_ONLY)

        assert result.default_channel == "stable-v1"

    @pytest.mark.parametrize(("preference", "expected"), [("major", "stable-v1"), ("minor", "stable-v1.0")])
    def test_default_follows_preference_on_tie(self, preference: str, expected: str) -> None:
        options = ChannelGenerationOptions(
            generate_major=True,
            generate_minor=True,
            default_channel_type_preference=StreamType(preference),
        )

        result = synthesize_channels("a", _versions(stable={"a-v1.0.0": "1.0.0"}), options)

        assert result.default_channel == expected

    def test_default_uses_version_at_channel_creation(self) -> None:
        options = ChannelGenerationOptions(
            generate_major=True,
            generate_minor=True,
            default_channel_type_preference=StreamType.MAJOR,
        )

        result = synthesize_channels("a", _versions(stable={"a-v1.0.0": "1.0.0", "a-v1.1.0": "1.1.0"}), options)

        assert result.default_channel == "stable-v1.1"

    def test_channels_never_hold_duplicate_entries(self) -> None:
        options = ChannelGenerationOptions(
            generate_major=True,
            generate_minor=True,
            default_channel_type_preference=StreamType.MINOR,
        )
        shared = {f"a-v1.{minor}.{patch}": f"1.{minor}.{patch}" for minor in range(3) for patch in range(3)}
        versions = _versions(candidate=shared, fast=shared, stable=shared)

        result = synthesize_channels("a", versions, options)

        for channel in result.channels.values():
            assert len(channel.entry_names()) == len(set(channel.entry_names()))

    def test_empty_input(self) -> None:
        result = synthesize_channels("a", _versions(), MAJOR_ONLY)

        assert result.channels == {}
        assert result.entries == []
        assert result.default_channel == ""
