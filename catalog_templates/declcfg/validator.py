"""Structural validation for DeclarativeConfig."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from catalog_templates.schemas.declcfg import Channel, DeclarativeConfig


@dataclass(frozen=True)
class CatalogValidationError:
    """Structured validation error for catalog documents."""

    code: str
    path: str
    message: str


def _has_cycle(adjacency: dict[str, set[str]]) -> bool:
    white = set(adjacency.keys())
    gray: set[str] = set()
    black: set[str] = set()

    def visit(node: str) -> bool:
        white.discard(node)
        gray.add(node)

        for nxt in adjacency.get(node, set()):
            if nxt in black:
                continue
            if nxt in gray:
                return True
            if visit(nxt):
                return True

        gray.discard(node)
        black.add(node)
        return False

    while white:
        node = next(iter(white))
        if visit(node):
            return True
    return False


def _replaces_adjacency(channel: Channel) -> dict[str, set[str]]:
    names = set(channel.entry_names())
    adjacency: dict[str, set[str]] = {name: set() for name in names}
    for entry in channel.entries:
        if entry.replaces and entry.replaces in names:
            adjacency[entry.name].add(entry.replaces)
    return adjacency


def _validate_channel(
    channel: Channel,
    path: str,
    package_bundles: set[str],
) -> list[CatalogValidationError]:
    errors: list[CatalogValidationError] = []

    if not channel.entries:
        errors.append(
            CatalogValidationError(
                code="EMPTY_CHANNEL",
                path=f"{path}.entries",
                message=f"Channel '{channel.name}' has no entries.",
            )
        )
        return errors

    duplicates = {name for name, count in Counter(channel.entry_names()).items() if count > 1}
    if duplicates:
        errors.append(
            CatalogValidationError(
                code="DUPLICATE_CHANNEL_ENTRY",
                path=f"{path}.entries",
                message=f"Entry names must be unique within a channel. Duplicates: {sorted(duplicates)}.",
            )
        )

    for idx, entry in enumerate(channel.entries):
        entry_path = f"{path}.entries[{idx}]"
        if entry.name not in package_bundles:
            errors.append(
                CatalogValidationError(
                    code="ENTRY_BUNDLE_NOT_FOUND",
                    path=f"{entry_path}.name",
                    message=f"Entry '{entry.name}' does not name a bundle of package '{channel.package}'.",
                )
            )
        # Minor-version channels replace across channel boundaries, so the
        # target only has to exist in the package.
        if entry.replaces and entry.replaces not in package_bundles:
            errors.append(
                CatalogValidationError(
                    code="REPLACES_NOT_FOUND",
                    path=f"{entry_path}.replaces",
                    message=f"Replaced bundle '{entry.replaces}' does not exist in package '{channel.package}'.",
                )
            )
        for skip_idx, skip in enumerate(entry.skips):
            if not skip:
                errors.append(
                    CatalogValidationError(
                        code="EMPTY_SKIP",
                        path=f"{entry_path}.skips[{skip_idx}]",
                        message="Skipped bundle names must not be empty.",
                    )
                )
            elif skip == entry.name:
                errors.append(
                    CatalogValidationError(
                        code="SELF_SKIP",
                        path=f"{entry_path}.skips[{skip_idx}]",
                        message=f"Entry '{entry.name}' skips itself.",
                    )
                )

    heads = channel.heads()
    if not heads:
        errors.append(
            CatalogValidationError(
                code="CHANNEL_HEAD_MISSING",
                path=path,
                message=f"Channel '{channel.name}' has no head; every entry is upgraded from.",
            )
        )
    elif len(heads) > 1:
        errors.append(
            CatalogValidationError(
                code="CHANNEL_HEAD_AMBIGUOUS",
                path=path,
                message=f"Channel '{channel.name}' has multiple heads: {sorted(e.name for e in heads)}.",
            )
        )

    if _has_cycle(_replaces_adjacency(channel)):
        errors.append(
            CatalogValidationError(
                code="REPLACES_CYCLE",
                path=path,
                message=f"Channel '{channel.name}' has a cycle in its replaces chain.",
            )
        )

    return errors


def validate_declarative_config(cfg: DeclarativeConfig) -> list[CatalogValidationError]:
    """Validate a DeclarativeConfig and return structured errors."""

    errors: list[CatalogValidationError] = []

    package_names = [package.name for package in cfg.packages]
    known_packages = set(package_names)
    duplicate_packages = {name for name, count in Counter(package_names).items() if count > 1}
    if duplicate_packages:
        errors.append(
            CatalogValidationError(
                code="DUPLICATE_PACKAGE",
                path="packages",
                message=f"Package names must be unique. Duplicates: {sorted(duplicate_packages)}.",
            )
        )

    bundles_by_package: dict[str, set[str]] = {}
    for bundle in cfg.bundles:
        bundles_by_package.setdefault(bundle.package, set()).add(bundle.name)

    channels_by_package: dict[str, set[str]] = {}
    seen_channels: set[tuple[str, str]] = set()
    for idx, channel in enumerate(cfg.channels):
        path = f"channels[{idx}]"
        if channel.package not in known_packages:
            errors.append(
                CatalogValidationError(
                    code="CHANNEL_UNKNOWN_PACKAGE",
                    path=f"{path}.package",
                    message=f"Channel '{channel.name}' references unknown package '{channel.package}'.",
                )
            )
        key = (channel.package, channel.name)
        if key in seen_channels:
            errors.append(
                CatalogValidationError(
                    code="DUPLICATE_CHANNEL",
                    path=f"{path}.name",
                    message=f"Channel '{channel.name}' is defined more than once for package '{channel.package}'.",
                )
            )
        seen_channels.add(key)
        channels_by_package.setdefault(channel.package, set()).add(channel.name)
        errors.extend(_validate_channel(channel, path, bundles_by_package.get(channel.package, set())))

    for idx, package in enumerate(cfg.packages):
        path = f"packages[{idx}]"
        if not package.name:
            errors.append(
                CatalogValidationError(
                    code="PACKAGE_NAME_EMPTY",
                    path=f"{path}.name",
                    message="Package name must not be empty.",
                )
            )
            continue

        channel_names = channels_by_package.get(package.name, set())
        if not channel_names:
            errors.append(
                CatalogValidationError(
                    code="PACKAGE_HAS_NO_CHANNELS",
                    path=path,
                    message=f"Package '{package.name}' has no channels.",
                )
            )
        if not package.default_channel:
            errors.append(
                CatalogValidationError(
                    code="DEFAULT_CHANNEL_UNSET",
                    path=f"{path}.defaultChannel",
                    message=f"Package '{package.name}' has no default channel.",
                )
            )
        elif channel_names and package.default_channel not in channel_names:
            errors.append(
                CatalogValidationError(
                    code="DEFAULT_CHANNEL_NOT_FOUND",
                    path=f"{path}.defaultChannel",
                    message=f"Default channel '{package.default_channel}' does not exist in package '{package.name}'.",
                )
            )

    channel_members: dict[str, set[str]] = {}
    for channel in cfg.channels:
        channel_members.setdefault(channel.package, set()).update(channel.entry_names())

    seen_bundles: set[tuple[str, str]] = set()
    for idx, bundle in enumerate(cfg.bundles):
        path = f"bundles[{idx}]"
        if bundle.package not in known_packages:
            errors.append(
                CatalogValidationError(
                    code="BUNDLE_UNKNOWN_PACKAGE",
                    path=f"{path}.package",
                    message=f"Bundle '{bundle.name}' references unknown package '{bundle.package}'.",
                )
            )
        key = (bundle.package, bundle.name)
        if key in seen_bundles:
            errors.append(
                CatalogValidationError(
                    code="DUPLICATE_BUNDLE",
                    path=f"{path}.name",
                    message=f"Bundle '{bundle.name}' is defined more than once for package '{bundle.package}'.",
                )
            )
        seen_bundles.add(key)

        try:
            prop = bundle.package_property()
            bundle.version()
        except ValueError as exc:
            errors.append(
                CatalogValidationError(
                    code="BUNDLE_PACKAGE_PROPERTY",
                    path=f"{path}.properties",
                    message=str(exc),
                )
            )
        else:
            if prop.package_name != bundle.package:
                errors.append(
                    CatalogValidationError(
                        code="BUNDLE_PACKAGE_PROPERTY",
                        path=f"{path}.properties",
                        message=(
                            f"Bundle '{bundle.name}' package property names '{prop.package_name}', "
                            f"expected '{bundle.package}'."
                        ),
                    )
                )

        if bundle.name not in channel_members.get(bundle.package, set()):
            errors.append(
                CatalogValidationError(
                    code="BUNDLE_NOT_IN_CHANNEL",
                    path=path,
                    message=f"Bundle '{bundle.name}' is not an entry of any channel of package '{bundle.package}'.",
                )
            )

    return errors


def ensure_valid_declarative_config(cfg: DeclarativeConfig) -> None:
    """Raise ValueError if cfg fails validation."""

    errors = validate_declarative_config(cfg)
    if not errors:
        return

    formatted = "; ".join([f"{e.code} ({e.path}): {e.message}" for e in errors])
    raise ValueError(f"Invalid declarative config: {formatted}")
