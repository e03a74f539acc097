"""Shared fixtures: bundle builders and an in-memory bundle renderer."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from catalog_templates.config import reset_settings
from catalog_templates.schemas.declcfg import Bundle, DeclarativeConfig, build_package_property


def build_bundle(
    name: str,
    version: str,
    package: str = "pkg",
    release: str | None = None,
    image: str | None = None,
) -> Bundle:
    return Bundle(
        name=name,
        package=package,
        image=image or f"quay.io/example/{name}:latest",
        properties=[build_package_property(package, version, release)],
    )


class FakeRenderer:
    """Async bundle renderer backed by a ``{image_ref: [Bundle, ...]}`` table."""

    def __init__(self, table: dict[str, list[Bundle]], failing: set[str] | None = None) -> None:
        self.table = table
        self.failing = failing or set()
        self.calls: list[str] = []

    async def __call__(self, image_ref: str) -> DeclarativeConfig:
        self.calls.append(image_ref)
        if image_ref in self.failing:
            raise RuntimeError(f"pull failed for {image_ref}")
        bundles = [bundle.model_copy(deep=True) for bundle in self.table.get(image_ref, [])]
        return DeclarativeConfig(bundles=bundles)


@pytest.fixture(autouse=True)
def _isolated_settings() -> Iterator[None]:
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_bundle() -> Callable[..., Bundle]:
    return build_bundle


@pytest.fixture
def fake_renderer() -> type[FakeRenderer]:
    return FakeRenderer
