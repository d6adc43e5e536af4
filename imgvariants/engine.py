"""
GenerationEngine - Writes the files described by a variant plan.
"""

import asyncio
import inspect
import logging
import os
import shutil
from typing import Optional

from .codec import CODEC_ERRORS, PillowCodec
from .errors import CodecError
from .options import ImageOptions
from .variant_spec import ImageSource, SourceMetadata, VariantPlan, VariantSpec, group_by_format


def _write_bytes(path: str, data: bytes) -> int:
    with open(path, 'wb') as f:
        f.write(data)
    return len(data)


def _copy_file(src: str, dst: str) -> int:
    shutil.copyfile(src, dst)
    return os.path.getsize(dst)


class GenerationEngine:
    """
    Realizes a VariantPlan for one source.

    Every variant is written concurrently; the first failure fails the whole
    plan and no partial result is returned.
    """

    def __init__(self, codec: Optional[PillowCodec] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize engine.

        Args:
            codec: Codec used to open, resize and encode images
            logger: Optional logger instance
        """
        self.codec = codec or PillowCodec(logger=logger)
        self.logger = logger or logging.getLogger(__name__)

    async def generate(
        self,
        source: ImageSource,
        metadata: SourceMetadata,
        plan: VariantPlan,
        options: ImageOptions
    ) -> VariantPlan:
        """
        Write every variant in the plan.

        Returns:
            A plan with the same grouping, each spec carrying its written size

        Raises:
            CodecError: if any variant fails
        """
        tasks = [
            self._write_variant(source, metadata, spec, options)
            for specs in plan.values()
            for spec in specs
        ]
        # Wait for every write to settle before reporting the first failure
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return group_by_format(results, plan.keys())

    async def _write_variant(
        self,
        source: ImageSource,
        metadata: SourceMetadata,
        spec: VariantSpec,
        options: ImageOptions
    ) -> VariantSpec:
        try:
            if spec.format == 'svg':
                size = await self._write_svg(source, spec)
            else:
                size = await self._write_raster(source, metadata, spec, options)
        except CODEC_ERRORS as e:
            self.logger.debug(f"Failed to write {spec.output_path}: {e}")
            raise CodecError(spec.output_path, str(e)) from e

        self.logger.debug(f"Wrote {spec.output_path}")
        return spec.with_size(size)

    async def _write_svg(self, source: ImageSource, spec: VariantSpec) -> int:
        if source.is_buffer:
            return await asyncio.to_thread(_write_bytes, spec.output_path, bytes(source.data))
        return await asyncio.to_thread(_copy_file, source.data, spec.output_path)

    async def _write_raster(
        self,
        source: ImageSource,
        metadata: SourceMetadata,
        spec: VariantSpec,
        options: ImageOptions
    ) -> int:
        # Handles are stateful, so each variant gets its own
        handle = self.codec.open(source, metadata)

        vector_upscale = metadata.is_vector and options.svg_allow_upscale
        if spec.width < metadata.width or vector_upscale:
            handle.resize(spec.width, spec.height, without_enlargement=not vector_upscale)

        hook = options.format_hooks.get(spec.format)
        if hook is not None:
            if inspect.iscoroutinefunction(hook):
                data = await hook(handle)
            else:
                data = await asyncio.to_thread(hook, handle)
            return await asyncio.to_thread(_write_bytes, spec.output_path, data)

        handle.to_format(spec.format, **options.codec_options_for(spec.format))
        return await asyncio.to_thread(handle.to_file, spec.output_path)
