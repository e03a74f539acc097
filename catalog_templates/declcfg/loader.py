"""Loading catalog documents from blob lists, JSON streams and YAML."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

import yaml

from catalog_templates.schemas.declcfg import (
    SCHEMA_BUNDLE,
    SCHEMA_CHANNEL,
    SCHEMA_PACKAGE,
    Bundle,
    Channel,
    DeclarativeConfig,
    Package,
)

logger = logging.getLogger(__name__)


def load_entries(entries: Iterable[dict[str, Any]]) -> DeclarativeConfig:
    """
    Build a DeclarativeConfig from raw blobs.

    Blobs are dispatched on their ``schema`` value. Blobs with an unknown
    schema are kept verbatim in ``others``.

    Raises:
        ValueError: If a blob is not a mapping or has no schema
        pydantic.ValidationError: If a known blob is malformed
    """
    cfg = DeclarativeConfig()
    for idx, blob in enumerate(entries):
        if not isinstance(blob, dict):
            raise ValueError(f"entries[{idx}]: expected a mapping, got {type(blob).__name__}")
        schema = blob.get("schema")
        if not schema:
            raise ValueError(f"entries[{idx}]: blob has no schema")

        if schema == SCHEMA_PACKAGE:
            cfg.packages.append(Package.model_validate(blob))
        elif schema == SCHEMA_CHANNEL:
            cfg.channels.append(Channel.model_validate(blob))
        elif schema == SCHEMA_BUNDLE:
            cfg.bundles.append(Bundle.model_validate(blob))
        else:
            logger.debug(f"Keeping blob with schema {schema!r} as-is")
            cfg.others.append(dict(blob))
    return cfg


def load_json_stream(text: str) -> DeclarativeConfig:
    """Load a stream of concatenated JSON blobs."""

    decoder = json.JSONDecoder()
    blobs: list[Any] = []
    pos = 0
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            break
        blob, pos = decoder.raw_decode(text, pos)
        blobs.append(blob)
    return load_entries(blobs)


def load_yaml(text: str) -> DeclarativeConfig:
    """Load a multi-document YAML stream; empty documents are ignored."""

    blobs = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    return load_entries(blobs)


def merge_configs(*configs: DeclarativeConfig) -> DeclarativeConfig:
    """Return a new document holding every blob of ``configs`` in order."""

    merged = DeclarativeConfig()
    for cfg in configs:
        merged.merge(cfg)
    return merged
