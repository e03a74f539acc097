"""Tests for the semver template entry point."""

from collections.abc import Callable
from typing import Any

import pytest

from catalog_templates.declcfg.validator import validate_declarative_config
from catalog_templates.schemas.declcfg import Bundle, DeclarativeConfig, Package
from catalog_templates.schemas.templates import SemverTemplateData
from catalog_templates.templates.errors import (
    AmbiguousVersionOrderingError,
    EmptyRenderError,
    RenderFailureError,
    SchemaMismatchError,
)
from catalog_templates.templates.semver.template import SemverTemplate


def _data(overrides: dict[str, Any] | None = None, **archetypes: list[Bundle]) -> SemverTemplateData:
    raw: dict[str, Any] = {"schema": "olm.semver"}
    raw.update(overrides or {})
    for archetype, bundles in archetypes.items():
        raw[archetype] = {"bundles": [{"image": bundle.image} for bundle in bundles]}
    return SemverTemplateData.model_validate(raw)


def _table(*bundles: Bundle) -> dict[str, list[Bundle]]:
    return {bundle.image: [bundle] for bundle in bundles}


@pytest.mark.asyncio
async def test_stable_major_channel(make_bundle: Callable[..., Bundle], fake_renderer: type) -> None:
    bundles = [make_bundle("a-v0.1.0", "0.1.0", package="a"), make_bundle("a-v0.1.1", "0.1.1", package="a")]
    template = SemverTemplate(fake_renderer(_table(*bundles)))

    cfg = await template.render(
        _data({"generateMajorChannels": True, "generateMinorChannels": False}, stable=bundles)
    )

    assert [(p.name, p.default_channel) for p in cfg.packages] == [("a", "stable-v0")]
    assert [c.name for c in cfg.channels] == ["stable-v0"]
    entries = {e.name: e for e in cfg.channels[0].entries}
    assert entries["a-v0.1.1"].replaces is None
    assert entries["a-v0.1.1"].skips == ["a-v0.1.0"]
    assert [b.name for b in cfg.bundles] == ["a-v0.1.0", "a-v0.1.1"]
    assert validate_declarative_config(cfg) == []


@pytest.mark.asyncio
async def test_full_template_produces_valid_catalog(
    make_bundle: Callable[..., Bundle],
    fake_renderer: type,
) -> None:
    candidate = [make_bundle(f"pkg-v{v}", v) for v in ["1.0.0-rc.1", "1.0.0", "1.1.0-rc.1", "2.0.0-rc.1"]]
    fast = [make_bundle(f"pkg-v{v}", v) for v in ["1.0.0", "1.1.0", "1.1.1"]]
    stable = [make_bundle(f"pkg-v{v}", v) for v in ["1.0.0", "1.1.0"]]
    unique = {bundle.name: bundle for bundle in [*candidate, *fast, *stable]}
    renderer = fake_renderer(_table(*unique.values()))

    cfg = await SemverTemplate(renderer).render(
        _data(
            {
                "generateMajorChannels": True,
                "generateMinorChannels": True,
                "defaultChannelTypePreference": "minor",
            },
            candidate=candidate,
            fast=fast,
            stable=stable,
        )
    )

    assert sorted(renderer.calls) == sorted(bundle.image for bundle in unique.values())
    assert [c.name for c in cfg.channels] == [
        "candidate-v1",
        "candidate-v1.0",
        "candidate-v1.1",
        "candidate-v2",
        "candidate-v2.0",
        "fast-v1",
        "fast-v1.0",
        "fast-v1.1",
        "stable-v1",
        "stable-v1.0",
        "stable-v1.1",
    ]
    assert cfg.packages[0].default_channel == "stable-v1.1"
    assert len(cfg.bundles) == len(unique)
    assert validate_declarative_config(cfg) == []


@pytest.mark.asyncio
async def test_reuses_rendered_package_blob(make_bundle: Callable[..., Bundle]) -> None:
    bundle = make_bundle("pkg-v1.0.0", "1.0.0")

    async def renderer(image_ref: str) -> DeclarativeConfig:
        return DeclarativeConfig(packages=[Package(name="pkg", description="widgets")], bundles=[bundle])

    cfg = await SemverTemplate(renderer).render(_data(stable=[bundle]))

    assert len(cfg.packages) == 1
    assert cfg.packages[0].description == "widgets"
    assert cfg.packages[0].default_channel == "stable-v1.0"


@pytest.mark.asyncio
async def test_build_metadata_collision_rejects_batch(
    make_bundle: Callable[..., Bundle],
    fake_renderer: type,
) -> None:
    bundles = [make_bundle("pkg-v1.0.0-1", "1.0.0+1"), make_bundle("pkg-v1.0.0-2", "1.0.0+2")]
    template = SemverTemplate(fake_renderer(_table(*bundles)))

    with pytest.raises(AmbiguousVersionOrderingError, match="pkg-v1.0.0-1"):
        await template.render(_data(stable=bundles))


@pytest.mark.asyncio
async def test_schema_mismatch_before_rendering(make_bundle: Callable[..., Bundle], fake_renderer: type) -> None:
    bundle = make_bundle("pkg-v1.0.0", "1.0.0")
    renderer = fake_renderer(_table(bundle))

    with pytest.raises(SchemaMismatchError):
        await SemverTemplate(renderer).render(
            _data({"generateMajorChannels": True, "defaultChannelTypePreference": "minor"}, stable=[bundle])
        )

    assert renderer.calls == []


@pytest.mark.asyncio
async def test_empty_template(fake_renderer: type) -> None:
    with pytest.raises(EmptyRenderError, match="rendered no bundles"):
        await SemverTemplate(fake_renderer({})).render(_data())


@pytest.mark.asyncio
async def test_render_failure_names_image(make_bundle: Callable[..., Bundle], fake_renderer: type) -> None:
    good = make_bundle("pkg-v1.0.0", "1.0.0")
    bad = make_bundle("pkg-v1.1.0", "1.1.0")
    renderer = fake_renderer(_table(good, bad), failing={bad.image})

    with pytest.raises(RenderFailureError, match=bad.image):
        await SemverTemplate(renderer).render(_data(stable=[good, bad]))


@pytest.mark.asyncio
async def test_render_bundle_delegates(make_bundle: Callable[..., Bundle], fake_renderer: type) -> None:
    bundle = make_bundle("pkg-v1.0.0", "1.0.0")
    template = SemverTemplate(fake_renderer(_table(bundle)))

    cfg = await template.render_bundle(bundle.image)

    assert [b.name for b in cfg.bundles] == ["pkg-v1.0.0"]
