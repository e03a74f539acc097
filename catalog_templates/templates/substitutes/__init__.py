"""Substitutes template and graph splicing."""

from catalog_templates.templates.substitutes.splicer import (
    apply_substitution,
    splice_bundle,
    splice_channel,
    validate_substitution,
)
from catalog_templates.templates.substitutes.template import SubstitutesTemplate, substitutes_template_from_config

__all__ = [
    "SubstitutesTemplate",
    "apply_substitution",
    "splice_bundle",
    "splice_channel",
    "substitutes_template_from_config",
    "validate_substitution",
]
