"""Bundle renderer contract and concurrent batch rendering."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from catalog_templates.config import get_settings
from catalog_templates.schemas.declcfg import Bundle, DeclarativeConfig
from catalog_templates.templates.errors import EmptyRenderError, RenderFailureError

logger = logging.getLogger(__name__)

# Resolves one bundle reference (image, path, ...) into a catalog fragment.
# Cancelling the awaiting task cancels the render.
BundleRenderer = Callable[[str], Awaitable[DeclarativeConfig]]


async def render_bundle(renderer: BundleRenderer, image_ref: str) -> DeclarativeConfig:
    """Render a single reference, wrapping renderer failures."""

    try:
        cfg = await renderer(image_ref)
    except RenderFailureError:
        raise
    except Exception as exc:
        raise RenderFailureError(image_ref, f"failed to render bundle image reference {image_ref!r}: {exc}") from exc
    if cfg is None:
        logger.warning(f"Renderer returned nothing for {image_ref}")
        return DeclarativeConfig()
    return cfg


async def render_single_bundle(renderer: BundleRenderer, image_ref: str) -> Bundle:
    """Render a reference that must yield exactly one bundle."""

    cfg = await render_bundle(renderer, image_ref)
    if not cfg.bundles:
        raise EmptyRenderError(image_ref, f"rendered bundle image reference {image_ref!r} contains no bundles")
    if len(cfg.bundles) > 1:
        raise RenderFailureError(
            image_ref,
            f"bundle image reference {image_ref!r} resulted in {len(cfg.bundles)} bundles, expected 1",
        )
    return cfg.bundles[0]


async def render_bundles(
    renderer: BundleRenderer,
    image_refs: Iterable[str],
    concurrency: int | None = None,
) -> dict[str, DeclarativeConfig]:
    """
    Render many references concurrently.

    Args:
        renderer: Async bundle renderer
        image_refs: References to render; duplicates are rendered once
        concurrency: Maximum in-flight renders (defaults to settings)

    Returns:
        Mapping of reference to rendered fragment, in input order

    Raises:
        RenderFailureError: If any render fails; outstanding renders are cancelled
    """
    refs = list(dict.fromkeys(image_refs))
    limit = concurrency or get_settings().render_concurrency
    semaphore = asyncio.Semaphore(limit)

    async def _bounded(ref: str) -> DeclarativeConfig:
        async with semaphore:
            logger.debug(f"Rendering bundle reference {ref}")
            return await render_bundle(renderer, ref)

    tasks = [asyncio.ensure_future(_bounded(ref)) for ref in refs]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise

    logger.info(f"Rendered {len(refs)} bundle references (concurrency={limit})")
    return dict(zip(refs, results))


__all__ = [
    "BundleRenderer",
    "render_bundle",
    "render_bundles",
    "render_single_bundle",
]
