"""Error taxonomy for template rendering and graph splicing.

Every error is terminal for the operation that raised it. Graph mutations
performed before the failure are not rolled back; callers that need
atomicity work on a copy of the document.
"""

from __future__ import annotations

from typing import ClassVar


class TemplateError(ValueError):
    """Base class for all template failures."""

    code: ClassVar[str] = "TEMPLATE_ERROR"

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{self.code} ({path}): {message}")
        self.path = path
        self.message = message


class InvalidTemplateError(TemplateError):
    """Template payload or its embedded catalog entries are malformed."""

    code = "INVALID_TEMPLATE"


class UnknownSchemaError(TemplateError):
    """No template kind is registered for the payload's schema tag."""

    code = "UNKNOWN_SCHEMA"

    def __init__(self, schema: str) -> None:
        super().__init__("schema", f"unknown template schema: {schema!r}")
        self.schema = schema


class InvalidVersionError(TemplateError):
    """A bundle's package property is missing, duplicated or malformed."""

    code = "INVALID_VERSION"


class AmbiguousVersionOrderingError(TemplateError):
    """Two bundles in one archetype differ only by build metadata."""

    code = "AMBIGUOUS_VERSION_ORDERING"

    def __init__(self, archetype: str, bundle: str, partner: str, version: str) -> None:
        super().__init__(
            archetype,
            f"bundle {bundle!r} and bundle {partner!r} both have version {version!r} "
            "once build metadata is stripped, so they cannot be ordered",
        )
        self.bundle = bundle
        self.partner = partner


class SchemaMismatchError(TemplateError):
    """Channel generation switches and the default channel preference disagree."""

    code = "SCHEMA_MISMATCH"


class PackageMismatchError(TemplateError):
    """A template mixes bundles from more than one package."""

    code = "PACKAGE_MISMATCH"


class DuplicateBundleError(TemplateError):
    """The same bundle name appears twice in one archetype."""

    code = "DUPLICATE_BUNDLE"


class MissingBundleError(TemplateError):
    """A template image reference produced no rendered bundle."""

    code = "MISSING_BUNDLE"


class InvalidSubstitutionError(TemplateError):
    """A substitution's name/base pair is empty or self-referential."""

    code = "INVALID_SUBSTITUTION"

    def __init__(self, rule: str, message: str) -> None:
        super().__init__(f"substitutions.{rule}", message)
        self.rule = rule


class UnknownBaseError(TemplateError):
    """The bundle named as a substitution base is not in the catalog."""

    code = "UNKNOWN_BASE"


class RenderFailureError(TemplateError):
    """The bundle renderer failed for an image reference."""

    code = "RENDER_FAILURE"


class EmptyRenderError(TemplateError):
    """Rendering produced no bundles where at least one was required."""

    code = "EMPTY_RENDER"


class NonMonotonicSubstitutionError(TemplateError):
    """A substitute does not sort strictly after its base."""

    code = "NON_MONOTONIC_SUBSTITUTION"


class ResultingGraphInvalidError(TemplateError):
    """The catalog failed validation after a splice."""

    code = "RESULTING_GRAPH_INVALID"


__all__ = [
    "AmbiguousVersionOrderingError",
    "DuplicateBundleError",
    "EmptyRenderError",
    "InvalidSubstitutionError",
    "InvalidTemplateError",
    "InvalidVersionError",
    "MissingBundleError",
    "NonMonotonicSubstitutionError",
    "PackageMismatchError",
    "RenderFailureError",
    "ResultingGraphInvalidError",
    "SchemaMismatchError",
    "TemplateError",
    "UnknownBaseError",
    "UnknownSchemaError",
]
