"""
Responsive image variant generation.

Plans and writes resized, re-encoded variants of a source image (local file,
remote URL, or bytes) with deterministic filenames, and describes each one
for use in srcset markup.

    plan = await imgvariants.generate("photo.jpg", widths=[None, 400], formats=["webp", "jpeg"])
    plan = imgvariants.predict_by_dimensions("photo.jpg", 800, 600, formats=["webp"])
"""

__version__ = "1.0.0"

from .errors import ImageVariantsError, ConfigurationError, SourceFetchError, CodecError
from .options import ImageOptions, CacheOptions, resolve_options
from .variant_spec import ImageSource, SourceMetadata, VariantSpec, VariantPlan
from .resolvers import get_formats, get_widths
from .naming import get_filename, short_hash
from .planner import plan_variants
from .codec import PillowCodec, ImageHandle
from .fetcher import RemoteFetcher
from .source import SourceResolver, is_full_url
from .engine import GenerationEngine
from .job_queue import JobQueue
from .image import (
    generate,
    predict_by_probing,
    predict_by_dimensions,
    get_concurrency,
    set_concurrency,
    get_queue,
)
from .generation_stats import GenerationStats
from .generation_progress import GenerationProgress
from .batch import BatchGenerator, BatchResult

__all__ = [
    "ImageVariantsError",
    "ConfigurationError",
    "SourceFetchError",
    "CodecError",
    "ImageOptions",
    "CacheOptions",
    "resolve_options",
    "ImageSource",
    "SourceMetadata",
    "VariantSpec",
    "VariantPlan",
    "get_formats",
    "get_widths",
    "get_filename",
    "short_hash",
    "plan_variants",
    "PillowCodec",
    "ImageHandle",
    "RemoteFetcher",
    "SourceResolver",
    "is_full_url",
    "GenerationEngine",
    "JobQueue",
    "generate",
    "predict_by_probing",
    "predict_by_dimensions",
    "get_concurrency",
    "set_concurrency",
    "get_queue",
    "GenerationStats",
    "GenerationProgress",
    "BatchGenerator",
    "BatchResult",
]
