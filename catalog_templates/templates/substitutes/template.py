"""Substitutes template: apply ordered bundle substitutions to a catalog."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from catalog_templates.declcfg.loader import load_entries
from catalog_templates.declcfg.validator import ensure_valid_declarative_config
from catalog_templates.declcfg.writer import ordered_blobs
from catalog_templates.schemas.declcfg import DeclarativeConfig
from catalog_templates.schemas.templates import SUBSTITUTES_SCHEMA, SubstitutesTemplateData
from catalog_templates.templates.errors import InvalidTemplateError
from catalog_templates.templates.renderer import BundleRenderer, render_bundle
from catalog_templates.templates.substitutes.splicer import apply_substitution

logger = logging.getLogger(__name__)


class SubstitutesTemplate:
    """Template kind for ``olm.template.substitutes`` inputs."""

    def __init__(self, renderer: BundleRenderer) -> None:
        self._renderer = renderer

    async def render_bundle(self, image_ref: str) -> DeclarativeConfig:
        return await render_bundle(self._renderer, image_ref)

    async def render(self, data: SubstitutesTemplateData) -> DeclarativeConfig:
        """
        Load the template's catalog entries and apply each substitution in order.

        Raises:
            InvalidTemplateError: If the entries do not form a valid catalog
            TemplateError: The first substitution failure
        """
        try:
            cfg = load_entries(data.entries)
            ensure_valid_declarative_config(cfg)
        except ValueError as exc:
            raise InvalidTemplateError("entries", f"template entries are not a valid catalog: {exc}") from exc

        for substitution in data.substitutions:
            await apply_substitution(cfg, substitution, self._renderer)

        logger.info(f"Applied {len(data.substitutions)} substitutions")
        return cfg


def substitutes_template_from_config(cfg: DeclarativeConfig) -> SubstitutesTemplateData:
    """Wrap an existing catalog in a substitutes template with no substitutions."""

    try:
        return SubstitutesTemplateData.model_validate(
            {"schema": SUBSTITUTES_SCHEMA, "entries": ordered_blobs(cfg), "substitutions": []}
        )
    except ValidationError as exc:
        raise InvalidTemplateError("entries", str(exc)) from exc


__all__ = ["SubstitutesTemplate", "substitutes_template_from_config"]
