"""Tests for template input schemas."""

from typing import Any

import pytest
from pydantic import ValidationError

from catalog_templates.schemas.templates import (
    Archetype,
    SemverTemplateData,
    StreamType,
    SubstitutesTemplateData,
    parse_template,
)


def _semver_template() -> dict[str, Any]:
    return {
        "schema": "olm.semver",
        "generateMajorChannels": True,
        "generateMinorChannels": False,
        "candidate": {"bundles": [{"image": "quay.io/example/a:1"}, {"image": "quay.io/example/a:2"}]},
        "stable": {"bundles": [{"image": "quay.io/example/a:1"}]},
    }


def test_parse_semver_template() -> None:
    data = parse_template(_semver_template())

    assert isinstance(data, SemverTemplateData)
    assert data.generate_major_channels is True
    assert data.generate_minor_channels is False
    assert data.default_channel_type_preference is None
    assert [entry.image for entry in data.archetype_bundles(Archetype.CANDIDATE)] == [
        "quay.io/example/a:1",
        "quay.io/example/a:2",
    ]
    assert data.archetype_bundles(Archetype.FAST) == []


def test_bundle_images_are_unique_in_first_seen_order() -> None:
    data = parse_template(_semver_template())

    assert data.bundle_images() == ["quay.io/example/a:1", "quay.io/example/a:2"]


def test_default_channel_type_preference() -> None:
    raw = _semver_template()
    raw["defaultChannelTypePreference"] = "major"

    data = parse_template(raw)

    assert data.default_channel_type_preference == StreamType.MAJOR


def test_unknown_preference_is_rejected() -> None:
    raw = _semver_template()
    raw["defaultChannelTypePreference"] = "patch"

    with pytest.raises(ValidationError):
        parse_template(raw)


def test_unknown_semver_field_is_rejected() -> None:
    raw = _semver_template()
    raw["generatePatchChannels"] = True

    with pytest.raises(ValidationError):
        parse_template(raw)


def test_parse_substitutes_template() -> None:
    data = parse_template(
        {
            "schema": "olm.template.substitutes",
            "entries": [{"schema": "olm.package", "name": "pkg"}],
            "substitutions": [{"name": "quay.io/example/pkg:1.1.0", "base": "pkg-v1.0.0"}],
        }
    )

    assert isinstance(data, SubstitutesTemplateData)
    assert data.substitutions[0].base == "pkg-v1.0.0"
    assert data.entries == [{"schema": "olm.package", "name": "pkg"}]
