"""Splicing a substitute bundle into an existing channel graph.

The substitute takes over the base entry's position in every channel that
contains it: it inherits the base's edges and skips the base, every entry
that upgraded from the base now upgrades from the substitute, and the base
stays behind as an edge-less leaf.
"""

from __future__ import annotations

import logging

from catalog_templates.declcfg.validator import ensure_valid_declarative_config
from catalog_templates.schemas.declcfg import Bundle, Channel, ChannelEntry, DeclarativeConfig
from catalog_templates.schemas.templates import Substitute
from catalog_templates.templates.errors import (
    InvalidSubstitutionError,
    InvalidVersionError,
    NonMonotonicSubstitutionError,
    ResultingGraphInvalidError,
    UnknownBaseError,
)
from catalog_templates.templates.renderer import BundleRenderer, render_single_bundle

logger = logging.getLogger(__name__)


def validate_substitution(substitution: Substitute) -> None:
    if not substitution.name:
        raise InvalidSubstitutionError("name", "substitution name must not be empty")
    if not substitution.base:
        raise InvalidSubstitutionError("base", "substitution base must not be empty")
    if substitution.name == substitution.base:
        raise InvalidSubstitutionError(
            "equal",
            f"substitution name and base must differ, both are {substitution.name!r}",
        )


def _add_skip(entry: ChannelEntry, name: str) -> None:
    if name not in entry.skips:
        entry.skips.append(name)


def _replace_skip(entry: ChannelEntry, old: str, new: str) -> None:
    skips: list[str] = []
    for skip in entry.skips:
        value = new if skip == old else skip
        if value not in skips:
            skips.append(value)
    entry.skips = skips


def splice_channel(channel: Channel, base: str, substitute: str) -> int:
    """
    Move ``substitute`` into the position of ``base`` within one channel.

    Entry positions are collected before anything is appended, and inbound
    edges are only rewritten on entries that existed before the splice. The
    rewrite also runs in channels that do not hold ``base`` themselves.

    Returns:
        Number of base entries that were spliced
    """
    existing_count = len(channel.entries)
    positions = [idx for idx, entry in enumerate(channel.entries) if entry.name == base]

    for idx in reversed(positions):
        base_entry = channel.entries[idx]
        new_entry = ChannelEntry(
            name=substitute,
            replaces=base_entry.replaces,
            skips=list(base_entry.skips),
            skip_range=base_entry.skip_range,
        )
        _add_skip(new_entry, base)
        channel.entries.append(new_entry)
        base_entry.clear_edges()
        logger.debug(f"Spliced {substitute} over {base} in channel {channel.name}")

    for entry in channel.entries[:existing_count]:
        if entry.replaces == base:
            entry.replaces = substitute
            _add_skip(entry, base)
        elif base in entry.skips:
            _replace_skip(entry, base, substitute)

    return len(positions)


def splice_bundle(cfg: DeclarativeConfig, base: Bundle, substitute: Bundle) -> None:
    """Splice ``substitute`` over ``base`` in every channel and add the bundle."""

    spliced = 0
    for channel in cfg.channels:
        spliced += splice_channel(channel, base.name, substitute.name)
    cfg.bundles.append(substitute)
    logger.info(f"Substituted {base.name} with {substitute.name} in {spliced} channel(s)")


async def apply_substitution(
    cfg: DeclarativeConfig,
    substitution: Substitute,
    renderer: BundleRenderer,
) -> None:
    """
    Apply one substitution to ``cfg`` in place.

    The substitute image is rendered and checked before the graph is touched.
    A failure in the final validation leaves ``cfg`` mutated.

    Raises:
        InvalidSubstitutionError: If name or base is empty, or they are equal
        UnknownBaseError: If no bundle is named ``base``
        RenderFailureError: If the substitute image fails to render
        EmptyRenderError: If the substitute image yields no bundle
        NonMonotonicSubstitutionError: If the substitute does not sort after the base
        ResultingGraphInvalidError: If the spliced catalog fails validation
    """
    validate_substitution(substitution)

    base = cfg.bundle_by_name(substitution.base)
    if base is None:
        raise UnknownBaseError(
            substitution.base,
            f"substitution base {substitution.base!r} not found in catalog bundles",
        )

    substitute = await render_single_bundle(renderer, substitution.name)

    try:
        base_version = base.composite_version()
        substitute_version = substitute.composite_version()
    except ValueError as exc:
        raise InvalidVersionError(substitution.name, f"cannot order substitution: {exc}") from exc

    if not base_version < substitute_version:
        raise NonMonotonicSubstitutionError(
            substitution.name,
            f"substitute {substitute.name!r} ({substitute_version}) must sort after "
            f"base {base.name!r} ({base_version})",
        )

    splice_bundle(cfg, base, substitute)

    try:
        ensure_valid_declarative_config(cfg)
    except ValueError as exc:
        raise ResultingGraphInvalidError(substitution.name, str(exc)) from exc


__all__ = [
    "apply_substitution",
    "splice_bundle",
    "splice_channel",
    "validate_substitution",
]
