"""
PillowCodec - Probes, resizes and encodes images using Pillow.

Vector (SVG) sources are measured from their XML and rasterised with
CairoSVG at the requested output size.
"""

import io
import logging
import os
import re
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from PIL import Image

from .errors import CodecError
from .variant_spec import ImageSource, SourceMetadata


# Pillow format names for output format tags
PIL_FORMATS = {
    'jpeg': 'JPEG',
    'png': 'PNG',
    'webp': 'WEBP',
    'gif': 'GIF',
    'avif': 'AVIF',
    'tiff': 'TIFF',
}

# Format tags for Pillow's reported formats
FORMAT_TAGS = {
    'JPEG': 'jpeg',
    'MPO': 'jpeg',
    'PNG': 'png',
    'WEBP': 'webp',
    'GIF': 'gif',
    'AVIF': 'avif',
    'TIFF': 'tiff',
    'BMP': 'bmp',
}

# Failures raised while decoding, measuring or encoding images
CODEC_ERRORS = (OSError, ValueError, KeyError, ElementTree.ParseError, Image.DecompressionBombError)

_SVG_SNIFF_BYTES = 4096

# CSS absolute units in px (96 px per inch); em uses the 16px default font size
SVG_UNITS = {
    '': 1.0,
    'px': 1.0,
    'in': 96.0,
    'cm': 96.0 / 2.54,
    'mm': 96.0 / 25.4,
    'pt': 96.0 / 72,
    'pc': 96.0 / 6,
    'em': 16.0,
}

_LENGTH_RE = re.compile(r'^\s*([0-9]*\.?[0-9]+)\s*([a-z%]*)\s*$', re.IGNORECASE)


def looks_like_svg(head: bytes) -> bool:
    """True if the leading bytes of a file look like an SVG document."""
    text = head[:_SVG_SNIFF_BYTES].decode('utf-8', errors='ignore').lstrip('\ufeff').lstrip()
    return text.startswith('<') and '<svg' in text


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    number, unit = match.groups()
    scale = SVG_UNITS.get(unit.lower())
    if scale is None:
        # Percentages and unknown units fall back to the viewBox
        return None
    return float(number) * scale


def parse_svg_dimensions(data: bytes) -> Tuple[int, int]:
    """
    Read the intrinsic size of an SVG from its width/height attributes,
    falling back to the viewBox.

    Raises:
        ValueError: if the document is not SVG or has no usable size
    """
    root = ElementTree.fromstring(data)
    if not root.tag.endswith('svg'):
        raise ValueError("Document root is not <svg>")

    width = _parse_length(root.get('width'))
    height = _parse_length(root.get('height'))

    view_box = root.get('viewBox')
    if view_box and (width is None or height is None):
        parts = [float(p) for p in view_box.replace(',', ' ').split()]
        if len(parts) != 4:
            raise ValueError(f"Invalid viewBox: {view_box!r}")
        vb_width, vb_height = parts[2], parts[3]
        if width is None and height is None:
            width, height = vb_width, vb_height
        elif width is None:
            width = height * vb_width / vb_height
        else:
            height = width * vb_height / vb_width

    if not width or not height:
        raise ValueError("SVG has no width/height or viewBox")
    return max(1, round(width)), max(1, round(height))


def _rasterize_svg(source: ImageSource, width: int, height: int) -> Image.Image:
    import cairosvg

    if source.is_buffer:
        png = cairosvg.svg2png(bytestring=bytes(source.data), output_width=width, output_height=height)
    else:
        png = cairosvg.svg2png(url=source.data, output_width=width, output_height=height)
    img = Image.open(io.BytesIO(png))
    img.load()
    return img


def _convert_color_mode(img: Image.Image, pil_format: str) -> Image.Image:
    """Convert image to a color mode the output format can store."""
    if pil_format == 'JPEG':
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img

    if pil_format in ('WEBP', 'AVIF'):
        if img.mode in ('P', 'LA', 'PA') or 'transparency' in img.info:
            return img.convert('RGBA')
        if img.mode not in ('RGB', 'RGBA'):
            return img.convert('RGB')
    return img


@dataclass
class ImageHandle:
    """
    A lazily evaluated decode/resize/encode pipeline for one source.

    Operations only record what should happen; pixels are decoded when the
    handle is rendered. Use clone() to branch a handle for another variant.
    """
    source: ImageSource
    metadata: SourceMetadata
    target_size: Optional[Tuple[int, int]] = None
    without_enlargement: bool = False
    output_format: Optional[str] = None
    save_options: Dict[str, Any] = field(default_factory=dict)

    def clone(self) -> 'ImageHandle':
        return replace(self, save_options=dict(self.save_options))

    def resize(self, width: int, height: Optional[int] = None, without_enlargement: bool = False) -> 'ImageHandle':
        """Resize to width, keeping aspect ratio unless height is given."""
        if height is None:
            height = max(1, round(width * self.metadata.height / self.metadata.width))
        self.target_size = (width, height)
        self.without_enlargement = without_enlargement
        return self

    def to_format(self, fmt: str, **save_options: Any) -> 'ImageHandle':
        """Set the output format and encoder options."""
        self.output_format = fmt
        self.save_options = save_options
        return self

    def _effective_size(self) -> Tuple[int, int]:
        native = (self.metadata.width, self.metadata.height)
        if self.target_size is None:
            return native
        if self.without_enlargement and self.target_size[0] > native[0]:
            return native
        return self.target_size

    def render(self) -> Image.Image:
        """Decode the source and apply the recorded resize."""
        size = self._effective_size()
        if self.metadata.is_vector:
            return _rasterize_svg(self.source, *size)

        fp = io.BytesIO(self.source.data) if self.source.is_buffer else self.source.data
        img = Image.open(fp)
        img.load()
        if size != img.size:
            img = img.resize(size, Image.Resampling.LANCZOS)
        return img

    def _save(self, fp) -> None:
        fmt = self.output_format or self.metadata.format
        pil_format = PIL_FORMATS.get(fmt)
        if pil_format is None:
            raise ValueError(f"Unsupported output format: {fmt!r}")
        img = _convert_color_mode(self.render(), pil_format)
        img.save(fp, format=pil_format, **self.save_options)

    def to_bytes(self) -> bytes:
        """Encode to bytes."""
        output = io.BytesIO()
        self._save(output)
        return output.getvalue()

    def to_file(self, path: str) -> int:
        """Encode and write to path; returns the written size in bytes."""
        self._save(path)
        return os.path.getsize(path)


class PillowCodec:
    """
    Codec capability backed by Pillow (raster) and CairoSVG (vector).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def probe(self, source: ImageSource) -> SourceMetadata:
        """
        Read the intrinsic dimensions and format of a source.

        Raises:
            CodecError: if the source cannot be read or identified
        """
        try:
            if source.is_buffer:
                data = bytes(source.data)
                size = len(data)
                head = data[:_SVG_SNIFF_BYTES]
            else:
                data = None
                size = None
                with open(source.data, 'rb') as f:
                    head = f.read(_SVG_SNIFF_BYTES)

            if looks_like_svg(head):
                if data is None:
                    with open(source.data, 'rb') as f:
                        data = f.read()
                width, height = parse_svg_dimensions(data)
                return SourceMetadata(width=width, height=height, format='svg', size=size)

            fp = io.BytesIO(data) if data is not None else source.data
            with Image.open(fp) as img:
                width, height = img.size
                fmt = FORMAT_TAGS.get(img.format, (img.format or '').lower() or None)
            return SourceMetadata(width=width, height=height, format=fmt, size=size)

        except CODEC_ERRORS as e:
            self.logger.debug(f"Probe failed for {source.identity}: {e}")
            raise CodecError(source.identity, str(e)) from e

    def open(self, source: ImageSource, metadata: SourceMetadata) -> ImageHandle:
        """Create a fresh handle for a source whose metadata is already known."""
        return ImageHandle(source=source, metadata=metadata)
