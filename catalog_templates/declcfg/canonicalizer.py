"""Canonicalization for DeclarativeConfig."""

from __future__ import annotations

import json
from typing import Any

from catalog_templates.schemas.declcfg import Channel, DeclarativeConfig


def _other_sort_key(blob: dict[str, Any]) -> tuple[str, str, str, str]:
    return (
        str(blob.get("package", "")),
        str(blob.get("schema", "")),
        str(blob.get("name", "")),
        json.dumps(blob, sort_keys=True, default=str),
    )


def _canonical_channel(channel: Channel) -> Channel:
    entries = [
        entry.model_copy(update={"skips": sorted(set(entry.skips))})
        for entry in sorted(channel.entries, key=lambda entry: entry.name)
    ]
    return channel.model_copy(update={"entries": entries})


def canonicalize_declarative_config(cfg: DeclarativeConfig) -> DeclarativeConfig:
    """Return a deterministic canonical form for a DeclarativeConfig."""

    packages = sorted(cfg.packages, key=lambda package: package.name)
    channels = sorted(
        (_canonical_channel(channel) for channel in cfg.channels),
        key=lambda channel: (channel.package, channel.name),
    )
    bundles = sorted(cfg.bundles, key=lambda bundle: (bundle.package, bundle.name))
    others = sorted(cfg.others, key=_other_sort_key)

    return cfg.model_copy(
        update={
            "packages": packages,
            "channels": channels,
            "bundles": bundles,
            "others": others,
        }
    )
