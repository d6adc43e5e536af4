"""
Variant planning - decides which variants a source produces.

plan_variants is a pure function of the source identity, its metadata and
the options. Both prediction and generation call it, so their filenames and
URLs always agree.
"""

import logging
import math
import os
from typing import List, Optional

from .errors import ConfigurationError
from .naming import build_variant_spec
from .options import ImageOptions
from .resolvers import get_formats, get_widths
from .variant_spec import SourceMetadata, VariantPlan, VariantSpec, group_by_format


logger = logging.getLogger(__name__)


def _svg_size(src: str, metadata: SourceMetadata) -> Optional[int]:
    # Uncompressed size, not directly comparable with raster outputs
    if metadata.size:
        return metadata.size
    if os.path.isfile(src):
        return os.path.getsize(src)
    return None


def _scaled_height(width: int, metadata: SourceMetadata) -> int:
    if width == metadata.width:
        return metadata.height
    return math.floor(width * metadata.height / metadata.width)


def plan_variants(src: str, metadata: SourceMetadata, options: ImageOptions) -> VariantPlan:
    """
    Plan the variants for a source.

    Args:
        src: Source identity (path, URL or buffer identity)
        metadata: Intrinsic dimensions and format of the source
        options: Resolved options

    Returns:
        Mapping of format -> specs sorted ascending by width

    Raises:
        ConfigurationError: if no output format can be determined
    """
    input_format = metadata.format or options.override_input_format
    output_formats = get_formats(options.formats)
    if not output_formats:
        raise ConfigurationError("At least one output format is required")

    specs: List[VariantSpec] = []
    evaluated: List[str] = []

    for output_format in output_formats:
        if not output_format:
            output_format = input_format
        if not output_format:
            raise ConfigurationError(
                f"Cannot use the source format for {src!r}: the format is unknown. "
                "Set override_input_format or request explicit formats."
            )
        if output_format not in evaluated:
            evaluated.append(output_format)

        if output_format == 'svg':
            if input_format != 'svg':
                logger.debug(f"Skipping: {src!r} asked for SVG output but received raster input.")
                continue

            spec = build_variant_spec(src, 'svg', metadata.width, metadata.height, False, options)
            specs.append(spec.with_size(_svg_size(src, metadata)))

            if options.svg_short_circuit:
                break
            continue

        allow_upscale = input_format == 'svg' and options.svg_allow_upscale
        widths = get_widths(metadata.width, options.widths, allow_upscale)
        for width in widths:
            include_width = len(widths) > 1 and width != metadata.width
            specs.append(build_variant_spec(
                src,
                output_format,
                width,
                _scaled_height(width, metadata),
                include_width,
                options,
            ))

    return group_by_format(specs, evaluated)
