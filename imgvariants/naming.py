"""
Deterministic output naming for variants.
"""

import hashlib
import os
import posixpath
from typing import Optional, Union

from .options import ImageOptions
from .variant_spec import MIME_TYPES, VariantSpec


def short_hash(src: str) -> str:
    """Stable 8 character identifier for a source string."""
    return hashlib.sha1(src.encode('utf-8')).hexdigest()[:8]


def get_filename(
    src: str,
    width: Union[int, bool, None],
    fmt: str,
    options: Optional[ImageOptions] = None
) -> str:
    """
    Derive the output filename for a source, width and file extension.

    A configured filename_format is tried first; a falsy return falls back
    to "{id}-{width}.{fmt}", or "{id}.{fmt}" when width is falsy.
    """
    options = options or ImageOptions()
    file_id = short_hash(src)

    if options.filename_format is not None:
        filename = options.filename_format(file_id, src, width, fmt, options)
        if filename:
            return filename

    if width:
        return f"{file_id}-{width}.{fmt}"
    return f"{file_id}.{fmt}"


def build_variant_spec(
    src: str,
    fmt: str,
    width: int,
    height: int,
    include_width_in_filename: bool,
    options: ImageOptions
) -> VariantSpec:
    """Build the VariantSpec for one planned output (size left unset)."""
    extension = options.extensions.get(fmt) or fmt
    filename = get_filename(src, width if include_width_in_filename else False, extension, options)
    url = posixpath.join(options.url_path, filename)

    return VariantSpec(
        format=fmt,
        width=width,
        height=height,
        filename=filename,
        output_path=os.path.join(options.output_dir, filename),
        url=url,
        mime_type=MIME_TYPES.get(fmt),
        srcset_entry=f"{url} {width}w",
    )
