"""Declarative config document operations: load, merge, validate and write."""

from catalog_templates.declcfg.canonicalizer import canonicalize_declarative_config
from catalog_templates.declcfg.loader import load_entries, load_json_stream, load_yaml, merge_configs
from catalog_templates.declcfg.validator import (
    CatalogValidationError,
    ensure_valid_declarative_config,
    validate_declarative_config,
)
from catalog_templates.declcfg.writer import ordered_blobs, write, write_json, write_yaml

__all__ = [
    "CatalogValidationError",
    "canonicalize_declarative_config",
    "ensure_valid_declarative_config",
    "load_entries",
    "load_json_stream",
    "load_yaml",
    "merge_configs",
    "ordered_blobs",
    "validate_declarative_config",
    "write",
    "write_json",
    "write_yaml",
]
