"""Serializing catalog documents as JSON or YAML streams."""

from __future__ import annotations

import json
from typing import Any, Literal

import yaml

from catalog_templates.config import get_settings
from catalog_templates.schemas.declcfg import DeclarativeConfig

OutputFormat = Literal["json", "yaml"]


def _dump(blob: Any) -> dict[str, Any]:
    return blob.model_dump(by_alias=True, mode="json")


def ordered_blobs(cfg: DeclarativeConfig) -> list[dict[str, Any]]:
    """
    Dump every blob in write order.

    Per package (by name): the package blob, its channels and bundles sorted by
    name, then its other blobs. Blobs without a package come last.
    """
    names: set[str] = {package.name for package in cfg.packages}
    names.update(channel.package for channel in cfg.channels)
    names.update(bundle.package for bundle in cfg.bundles)
    names.update(blob["package"] for blob in cfg.others if blob.get("package"))
    names.discard("")

    blobs: list[dict[str, Any]] = []
    for name in sorted(names):
        blobs.extend(_dump(package) for package in cfg.packages if package.name == name)
        channels = sorted((c for c in cfg.channels if c.package == name), key=lambda c: c.name)
        blobs.extend(_dump(channel) for channel in channels)
        bundles = sorted((b for b in cfg.bundles if b.package == name), key=lambda b: b.name)
        blobs.extend(_dump(bundle) for bundle in bundles)
        blobs.extend(dict(blob) for blob in cfg.others if blob.get("package") == name)

    blobs.extend(_dump(channel) for channel in cfg.channels if not channel.package)
    blobs.extend(_dump(bundle) for bundle in cfg.bundles if not bundle.package)
    blobs.extend(dict(blob) for blob in cfg.others if not blob.get("package"))
    return blobs


def write_json(cfg: DeclarativeConfig) -> str:
    return "".join(json.dumps(blob, indent=2) + "\n" for blob in ordered_blobs(cfg))


def write_yaml(cfg: DeclarativeConfig) -> str:
    return "".join(
        "---\n" + yaml.safe_dump(blob, sort_keys=False, default_flow_style=False)
        for blob in ordered_blobs(cfg)
    )


def write(cfg: DeclarativeConfig, fmt: OutputFormat | None = None) -> str:
    """Serialize ``cfg`` in ``fmt``, defaulting to the configured output format."""

    fmt = fmt or get_settings().output_format
    if fmt == "json":
        return write_json(cfg)
    if fmt == "yaml":
        return write_yaml(cfg)
    raise ValueError(f"Unsupported output format: {fmt!r}")
