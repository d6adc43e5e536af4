"""
ImageOptions - Resolved configuration for planning and generating variants.
"""

import os
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError
from .format_hooks import avif_hook


DURATION_UNITS = {
    's': 1,
    'm': 60,
    'h': 60 * 60,
    'd': 60 * 60 * 24,
    'w': 60 * 60 * 24 * 7,
    'y': 60 * 60 * 24 * 365,
}

_DURATION_RE = re.compile(r'^(\d+(?:\.\d+)?)([smhdwy])$')


def parse_duration(duration: str) -> Optional[float]:
    """
    Parse a cache duration such as "30s", "2h" or "1d" into seconds.

    Returns None for "*", meaning cached responses never expire.

    Raises:
        ValueError: if the string is not a recognised duration
    """
    duration = duration.strip()
    if duration == '*':
        return None
    match = _DURATION_RE.match(duration)
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")
    value, unit = match.groups()
    return float(value) * DURATION_UNITS[unit]


@dataclass(frozen=True)
class CacheOptions:
    """
    Options for fetching and caching remote sources.

    Attributes:
        duration: How long a cached response stays fresh ("1d", "*" = forever)
        directory: Directory holding cached responses
        remove_url_query_params: Ignore the query string when computing cache keys
        fetch_options: Extra keyword arguments for the HTTP request (headers, timeout)
    """
    duration: str = '1d'
    directory: str = '.cache'
    remove_url_query_params: bool = False
    fetch_options: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> List[str]:
        errors = []
        try:
            parse_duration(self.duration)
        except (ValueError, AttributeError):
            errors.append(f"cache_options.duration is not a valid duration: {self.duration!r}")
        if not self.directory:
            errors.append("cache_options.directory is required")
        return errors


FilenameFormat = Callable[[str, str, Union[int, bool, None], str, 'ImageOptions'], Optional[str]]


@dataclass(frozen=True)
class ImageOptions:
    """
    Options controlling which variants are produced and where they are written.

    Attributes:
        widths: Requested widths; None means the intrinsic width
        formats: Requested output formats; None means the source format
        concurrency: Maximum number of images processed at once
        url_path: Public URL prefix for generated files
        output_dir: Directory generated files are written to
        svg_short_circuit: Return only the SVG when the source is SVG
        svg_allow_upscale: Allow rasterising vector sources above intrinsic width
        override_input_format: Source format to assume when none was probed
        codec_options: Per-format keyword arguments passed to the encoder
        extensions: Per-format file extension overrides
        format_hooks: Per-format custom encode functions
        cache_options: Remote fetch cache options
        filename_format: Custom naming strategy, falsy result uses the default
        source_identity: Identity used to name buffer sources
    """
    widths: Tuple[Optional[int], ...] = (None,)
    formats: Tuple[Optional[str], ...] = ('webp', 'jpeg')
    concurrency: int = 10
    url_path: str = '/img/'
    output_dir: str = 'img/'
    svg_short_circuit: bool = False
    svg_allow_upscale: bool = True
    override_input_format: Optional[str] = None
    codec_options: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    extensions: Dict[str, str] = field(default_factory=dict)
    format_hooks: Dict[str, Callable] = field(default_factory=lambda: {'avif': avif_hook})
    cache_options: CacheOptions = field(default_factory=CacheOptions)
    filename_format: Optional[FilenameFormat] = None
    source_identity: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'ImageOptions':
        """Create options with output locations and concurrency taken from the environment."""
        overrides = {}
        if os.getenv('IMGVARIANTS_OUTPUT_DIR'):
            overrides['output_dir'] = os.getenv('IMGVARIANTS_OUTPUT_DIR')
        if os.getenv('IMGVARIANTS_URL_PATH'):
            overrides['url_path'] = os.getenv('IMGVARIANTS_URL_PATH')
        if os.getenv('IMGVARIANTS_CONCURRENCY'):
            try:
                overrides['concurrency'] = int(os.getenv('IMGVARIANTS_CONCURRENCY'))
            except ValueError:
                raise ConfigurationError(
                    f"IMGVARIANTS_CONCURRENCY must be an integer, got {os.getenv('IMGVARIANTS_CONCURRENCY')!r}"
                )
        return resolve_options(cls(), **overrides)

    def codec_options_for(self, fmt: str) -> Dict[str, Any]:
        """Encoder keyword arguments for an output format."""
        return dict(self.codec_options.get(fmt, {}))

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.widths:
            errors.append("widths must contain at least one entry (use None for the intrinsic width)")
        for width in self.widths:
            if width is None:
                continue
            if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
                errors.append(f"widths entries must be positive integers or None, got {width!r}")

        for fmt in self.formats:
            if fmt is not None and not isinstance(fmt, str):
                errors.append(f"formats entries must be strings or None, got {fmt!r}")

        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int) or self.concurrency < 1:
            errors.append(f"concurrency must be a positive integer, got {self.concurrency!r}")

        if not isinstance(self.url_path, str):
            errors.append("url_path must be a string")
        if not isinstance(self.output_dir, str) or not self.output_dir:
            errors.append("output_dir is required")

        if self.filename_format is not None and not callable(self.filename_format):
            errors.append("filename_format must be callable")
        for fmt, hook in self.format_hooks.items():
            if not callable(hook):
                errors.append(f"format_hooks[{fmt!r}] must be callable")

        errors.extend(self.cache_options.validate())
        return errors


_OPTION_NAMES = {f.name for f in fields(ImageOptions)}


def _normalize_formats(formats: Union[str, Sequence[Optional[str]], None]) -> Tuple[Optional[str], ...]:
    if formats is None:
        return ()
    if isinstance(formats, str):
        formats = formats.split(',')
    normalized = []
    for fmt in formats:
        if isinstance(fmt, str):
            fmt = fmt.strip().lower() or None
        normalized.append(fmt)
    return tuple(normalized)


def resolve_options(
    options: Union[ImageOptions, Mapping[str, Any], None] = None,
    **overrides: Any
) -> ImageOptions:
    """
    Merge overrides over a base set of options and validate the result.

    Args:
        options: Base options, a mapping of option names, or None for defaults
        **overrides: Individual option overrides

    Returns:
        A validated ImageOptions

    Raises:
        ConfigurationError: on unknown option names or invalid values
    """
    if options is None:
        base = ImageOptions()
    elif isinstance(options, ImageOptions):
        base = options
    elif isinstance(options, Mapping):
        base = ImageOptions()
        overrides = {**options, **overrides}
    else:
        raise ConfigurationError(f"options must be ImageOptions or a mapping, got {type(options).__name__}")

    unknown = sorted(set(overrides) - _OPTION_NAMES)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

    if 'formats' in overrides:
        overrides['formats'] = _normalize_formats(overrides['formats'])
    if 'widths' in overrides:
        widths = overrides['widths']
        overrides['widths'] = tuple(widths) if widths is not None else ()
    if isinstance(overrides.get('cache_options'), Mapping):
        cache = overrides['cache_options']
        try:
            overrides['cache_options'] = replace(base.cache_options, **cache)
        except TypeError as e:
            raise ConfigurationError(f"Invalid cache_options: {e}") from e

    resolved = replace(base, **overrides) if overrides else base

    errors = resolved.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))
    return resolved
