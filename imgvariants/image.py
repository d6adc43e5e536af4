"""
Public entry points: generate variants, or predict them without generating.
"""

import asyncio
import logging
import os
from typing import Any, Optional, Union

from .codec import PillowCodec
from .engine import GenerationEngine
from .errors import ConfigurationError
from .fetcher import RemoteFetcher
from .job_queue import DEFAULT_CONCURRENCY, JobQueue
from .options import ImageOptions, resolve_options
from .planner import plan_variants
from .source import SourceResolver, buffer_source
from .variant_spec import ImageSource, SourceMetadata, VariantPlan


Src = Union[str, bytes, bytearray]

_queue = JobQueue(DEFAULT_CONCURRENCY, logger=logging.getLogger('imgvariants.queue'))


def get_queue() -> JobQueue:
    """The process-wide queue used when no queue is passed explicitly."""
    return _queue


def get_concurrency() -> int:
    return _queue.concurrency


def set_concurrency(concurrency: int) -> None:
    """Change how many images the process-wide queue processes at once."""
    _queue.concurrency = concurrency


def _check_src(src: Optional[Src], options: ImageOptions) -> None:
    if not src:
        raise ConfigurationError(
            "src is required (a string file path, string URL, or bytes buffer)"
        )
    if isinstance(src, (bytes, bytearray)) and not options.source_identity:
        raise ConfigurationError("source_identity is required when src is a bytes buffer")
    if not isinstance(src, (str, bytes, bytearray)):
        raise ConfigurationError(f"src must be a string or bytes, got {type(src).__name__}")


async def process_image(
    src: Src,
    options: ImageOptions,
    resolver: SourceResolver,
    engine: GenerationEngine
) -> VariantPlan:
    """Run one job: resolve the source, probe it, plan it, and write every variant."""
    source = await resolver.resolve(src, options)
    metadata = await asyncio.to_thread(engine.codec.probe, source)
    plan = plan_variants(source.identity, metadata, options)
    return await engine.generate(source, metadata, plan, options)


async def generate(
    src: Src,
    options: Union[ImageOptions, dict, None] = None,
    *,
    queue: Optional[JobQueue] = None,
    codec: Optional[PillowCodec] = None,
    fetcher: Optional[RemoteFetcher] = None,
    logger: Optional[logging.Logger] = None,
    **overrides: Any
) -> VariantPlan:
    """
    Generate every variant of an image.

    Args:
        src: Local file path, absolute URL, or bytes (needs source_identity)
        options: Base options (ImageOptions or mapping); defaults if omitted
        queue: Queue to run on; the process-wide queue if omitted
        codec: Codec to use; a PillowCodec if omitted
        fetcher: Fetcher for remote sources; built from cache_options if omitted
        logger: Optional logger instance
        **overrides: Individual option overrides

    Returns:
        Mapping of format -> specs (ascending width) with sizes filled in

    Raises:
        ConfigurationError: invalid src or options
        SourceFetchError: remote source unavailable
        CodecError: a variant could not be produced
    """
    options = resolve_options(options, **overrides)
    _check_src(src, options)

    await asyncio.to_thread(os.makedirs, options.output_dir, exist_ok=True)

    engine = GenerationEngine(codec, logger=logger)
    resolver = SourceResolver(fetcher, logger=logger)
    queue = queue or _queue
    return await queue.add(lambda: process_image(src, options, resolver, engine))


def predict_by_probing(
    src: Src,
    options: Union[ImageOptions, dict, None] = None,
    *,
    codec: Optional[PillowCodec] = None,
    **overrides: Any
) -> VariantPlan:
    """
    Plan variants for a local file (or buffer) without writing anything.

    The source is probed for its dimensions and format.
    """
    options = resolve_options(options, **overrides)
    _check_src(src, options)

    if isinstance(src, (bytes, bytearray)):
        source = buffer_source(src, options)
    else:
        source = ImageSource(data=src, identity=src)

    metadata = (codec or PillowCodec()).probe(source)
    return plan_variants(source.identity, metadata, options)


def predict_by_dimensions(
    src: Src,
    width: int,
    height: int,
    options: Union[ImageOptions, dict, None] = None,
    **overrides: Any
) -> VariantPlan:
    """
    Plan variants from known dimensions without touching the source.

    The source format is unknown here, so `formats` may only contain None
    when override_input_format is set.
    """
    options = resolve_options(options, **overrides)
    _check_src(src, options)

    size = None
    if isinstance(src, (bytes, bytearray)):
        src, size = options.source_identity, len(src)

    try:
        metadata = SourceMetadata(width=width, height=height, size=size)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return plan_variants(src, metadata, options)
