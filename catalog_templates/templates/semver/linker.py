"""Upgrade edge linking for the semver template.

A single global pass over every provisional entry, walked in
``(archetype, stream type, version)`` order. Edges never cross an archetype,
stream type or major version boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import pairwise

from catalog_templates.core.version import version_sort_key
from catalog_templates.schemas.declcfg import Channel
from catalog_templates.templates.semver.synthesizer import STREAM_TYPE_PRIORITY, EntryTuple
from catalog_templates.templates.semver.versions import ARCHETYPE_PRIORITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """What changed between two adjacent entries of the walk."""

    arch_change: bool
    kind_change: bool
    x_change: bool
    y_change: bool

    @classmethod
    def between(cls, prev: EntryTuple, cur: EntryTuple) -> Transition:
        return cls(
            arch_change=prev.archetype != cur.archetype,
            kind_change=prev.stream_type != cur.stream_type,
            x_change=prev.version.major != cur.version.major,
            y_change=prev.version.minor != cur.version.minor,
        )

    @property
    def hard_boundary(self) -> bool:
        return self.arch_change or self.kind_change or self.x_change

    @property
    def any_change(self) -> bool:
        return self.hard_boundary or self.y_change


@dataclass(frozen=True)
class LinkAccumulator:
    """Linking state carried from one step of the walk to the next.

    ``head`` is the running head of the previous Y-stream; ``skips`` collects
    every entry passed since the last hard boundary.
    """

    head: str = ""
    skips: frozenset[str] = frozenset()

    def advance(self, prev: EntryTuple, transition: Transition) -> LinkAccumulator:
        if transition.hard_boundary:
            return LinkAccumulator()
        head = prev.name if transition.y_change else self.head
        return LinkAccumulator(head=head, skips=self.skips | {prev.name})


def _link_order(item: EntryTuple) -> tuple:
    return (
        ARCHETYPE_PRIORITY[item.archetype],
        STREAM_TYPE_PRIORITY[item.stream_type],
        version_sort_key(item.version),
        item.name,
    )


def _finalize(channels: dict[str, Channel], item: EntryTuple, acc: LinkAccumulator) -> None:
    entry = channels[item.channel].entries[item.index]
    entry.replaces = acc.head or None
    entry.skips = sorted(acc.skips - {acc.head})
    logger.debug(f"Linked {item.channel}/{entry.name}: replaces={entry.replaces!r} skips={entry.skips}")


def link_channels(channels: dict[str, Channel], entries: list[EntryTuple]) -> list[Channel]:
    """
    Compute ``replaces``/``skips`` edges for every provisional entry.

    Args:
        channels: Provisional channels keyed by name, mutated in place
        entries: Worklist recorded during synthesis

    Returns:
        All channels sorted by name
    """
    ordered = sorted(entries, key=_link_order)
    acc = LinkAccumulator()

    for prev, cur in pairwise(ordered):
        transition = Transition.between(prev, cur)
        if transition.any_change:
            _finalize(channels, prev, acc)
        acc = acc.advance(prev, transition)

    if len(ordered) > 1:
        prev, cur = ordered[-2], ordered[-1]
        if not Transition.between(prev, cur).hard_boundary:
            _finalize(channels, cur, acc)

    return sorted(channels.values(), key=lambda channel: channel.name)


__all__ = ["LinkAccumulator", "Transition", "link_channels"]
