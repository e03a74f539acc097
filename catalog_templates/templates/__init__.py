"""Template kinds and the single dispatch point that selects one.

Template kinds form a closed set keyed by ``TemplateSchema``; a payload is
parsed into its variant once and the matching template renders it.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from catalog_templates.schemas.declcfg import DeclarativeConfig
from catalog_templates.schemas.templates import (
    SemverTemplateData,
    SubstitutesTemplateData,
    TemplateSchema,
    parse_template,
)
from catalog_templates.templates.errors import InvalidTemplateError, UnknownSchemaError
from catalog_templates.templates.renderer import BundleRenderer
from catalog_templates.templates.semver.template import SemverTemplate
from catalog_templates.templates.substitutes.template import SubstitutesTemplate

Template = SemverTemplate | SubstitutesTemplate


def create_template(
    data: SemverTemplateData | SubstitutesTemplateData,
    renderer: BundleRenderer,
) -> Template:
    """Return the template that renders ``data``."""

    if isinstance(data, SemverTemplateData):
        return SemverTemplate(renderer)
    if isinstance(data, SubstitutesTemplateData):
        return SubstitutesTemplate(renderer)
    raise UnknownSchemaError(str(getattr(data, "template_schema", type(data).__name__)))


def parse_template_payload(raw: dict[str, Any]) -> SemverTemplateData | SubstitutesTemplateData:
    """
    Parse a raw template payload.

    Raises:
        UnknownSchemaError: If the ``schema`` tag names no template kind
        InvalidTemplateError: If the payload does not match its kind
    """
    if not isinstance(raw, dict):
        raise InvalidTemplateError("", f"template must be a mapping, got {type(raw).__name__}")
    schema = raw.get("schema")
    if not schema:
        raise InvalidTemplateError("schema", "template has no schema")
    if schema not in {kind.value for kind in TemplateSchema}:
        raise UnknownSchemaError(str(schema))
    try:
        return parse_template(raw)
    except ValidationError as exc:
        raise InvalidTemplateError(str(schema), str(exc)) from exc


async def render_template(raw: dict[str, Any], renderer: BundleRenderer) -> DeclarativeConfig:
    """Parse ``raw`` and render it with the matching template kind."""

    data = parse_template_payload(raw)
    template = create_template(data, renderer)
    return await template.render(data)


__all__ = [
    "SemverTemplate",
    "SubstitutesTemplate",
    "Template",
    "create_template",
    "parse_template_payload",
    "render_template",
]
